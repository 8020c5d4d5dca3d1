"""
Tests for LogicalCall and result normalisation.
"""

from ..abis import POOL_ABI
from ..types import Failure, LogicalCall, Success, normalize_result

POOL = "0x0000000000000000000000000000000000000b01"


class TestNormalizeResult:
    """Test folding backend result shapes into ProbeResults."""

    def test_probe_results_pass_through(self):
        assert normalize_result(Success(1)) == Success(1)
        assert normalize_result(Failure("x")) == Failure("x")

    def test_status_dicts(self):
        assert normalize_result({"status": "success", "result": (1, 2)}) == Success((1, 2))
        failure = normalize_result({"status": "failure", "error": "reverted"})
        assert failure == Failure("reverted")

    def test_exceptions_become_failures(self):
        result = normalize_result(ValueError("bad"))
        assert isinstance(result, Failure)
        assert "ValueError" in result.reason

    def test_bare_values(self):
        assert normalize_result(0) == Success(0)
        assert normalize_result([1, -60]) == Success([1, -60])
        assert normalize_result(None) == Failure("empty result")

    def test_ok_flags(self):
        assert Success(None).ok
        assert not Failure("x").ok


class TestLogicalCall:
    """Test LogicalCall identity."""

    def test_abi_excluded_from_equality(self):
        """Test that calls compare by target, function and args only."""
        a = LogicalCall(POOL, POOL_ABI, "liquidity")
        b = LogicalCall(POOL, [], "liquidity")
        assert a == b
        assert hash(a) == hash(b)

    def test_describe(self):
        call = LogicalCall(POOL, POOL_ABI, "getPool", ("0xa", "0xb", 3000))
        assert call.describe() == f"{POOL}.getPool(0xa, 0xb, 3000)"
