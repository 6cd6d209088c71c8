"""ExitCode IntEnum のテスト。"""

from enum import IntEnum

import pytest

from kasane.models.exit_code import ExitCode


class TestExitCodeValues:
    """ExitCode IntEnum の値を検証する。"""

    def test_success_is_zero(self) -> None:
        assert ExitCode.SUCCESS == 0

    def test_not_found_is_one(self) -> None:
        assert ExitCode.NOT_FOUND == 1

    def test_boundary_violation_is_two(self) -> None:
        assert ExitCode.BOUNDARY_VIOLATION == 2

    def test_input_error_is_four(self) -> None:
        assert ExitCode.INPUT_ERROR == 4

    def test_has_four_members(self) -> None:
        assert len(ExitCode) == 4


class TestExitCodeIsIntEnum:
    """ExitCode が IntEnum であることを検証する。"""

    def test_is_int_enum(self) -> None:
        assert issubclass(ExitCode, IntEnum)

    @pytest.mark.parametrize("member", list(ExitCode))
    def test_usable_as_int(self, member: ExitCode) -> None:
        assert int(member) == member.value
