from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U256, Uint

from bridged_evm.directory import (
    compute_contract_address,
    compute_create2_contract_address,
)
from bridged_evm.state import get_account, get_account_optional, get_storage
from bridged_evm.vm.instructions import Ops
from tests.helpers import (
    CONTRACT,
    OTHER,
    SENDER,
    assemble,
    contract,
    push,
    return_top,
    run_code,
    word,
)

SLOT = Bytes32(word(0))


def call_other(
    op: Ops = Ops.CALL, value: int = 0, gas: int = 0xFFFF
) -> bytes:
    """
    Call `OTHER`, copying 32 bytes of its output to memory offset 0.
    """
    if op in (Ops.CALL, Ops.CALLCODE):
        return assemble(32, 0, 0, 0, value, 0xB0B, gas, op)
    return assemble(32, 0, 0, 0, 0xB0B, gas, op)


def returning_memory() -> bytes:
    return assemble(32, 0, Ops.RETURN)


def test_call_returns_child_output_and_keeps_its_writes() -> None:
    child = assemble(1, 0, Ops.SSTORE, 0x42) + return_top()
    code = call_other() + assemble(Ops.POP) + returning_memory()
    output, state = run_code(code, extra_accounts={OTHER: contract(child)})
    assert output.error is None
    assert output.return_data == word(0x42)
    assert get_storage(state, OTHER, SLOT) == U256(1)


def test_reverted_child_pushes_zero_and_loses_its_writes() -> None:
    child = assemble(1, 0, Ops.SSTORE, 0, 0, Ops.REVERT)
    code = call_other() + return_top()
    output, state = run_code(code, extra_accounts={OTHER: contract(child)})
    assert output.error is None
    assert output.return_data == word(0)
    assert get_storage(state, OTHER, SLOT) == U256(0)


def test_reverting_child_returns_unused_gas() -> None:
    code = call_other(gas=10_000) + return_top()
    reverted, _ = run_code(
        code, extra_accounts={OTHER: contract(assemble(0, 0, Ops.REVERT))}
    )
    halted, _ = run_code(code, extra_accounts={OTHER: contract(b"\xfe")})
    assert reverted.error is None
    assert halted.error is None
    # The reverting child spends two pushes, the halting one everything.
    assert reverted.gas_left - halted.gas_left == 10_000 - 6


def test_static_call_forbids_writes_in_the_child() -> None:
    child = assemble(1, 0, Ops.SSTORE)
    code = call_other(Ops.STATICCALL) + return_top()
    output, state = run_code(code, extra_accounts={OTHER: contract(child)})
    assert output.error is None
    assert output.return_data == word(0)
    assert get_storage(state, OTHER, SLOT) == U256(0)


def test_call_beyond_the_depth_limit_pushes_zero() -> None:
    child = assemble(1, 0, Ops.SSTORE)
    code = call_other() + return_top()
    output, state = run_code(
        code, depth=1024, extra_accounts={OTHER: contract(child)}
    )
    assert output.error is None
    assert output.return_data == word(0)
    assert get_storage(state, OTHER, SLOT) == U256(0)


def test_create_beyond_the_depth_limit_pushes_zero() -> None:
    code = assemble(0, 0, 0, Ops.CREATE) + return_top()
    output, _ = run_code(code, depth=1024)
    assert output.error is None
    assert output.return_data == word(0)


def test_value_transfer() -> None:
    code = call_other(value=7) + return_top()
    output, state = run_code(
        code, extra_accounts={CONTRACT: contract(code, balance=100)}
    )
    assert output.return_data == word(1)
    assert get_account(state, OTHER).balance == U256(7)
    assert get_account(state, CONTRACT).balance == U256(93)


def test_value_transfer_without_funds_pushes_zero() -> None:
    code = call_other(value=1000) + return_top()
    output, state = run_code(
        code, extra_accounts={CONTRACT: contract(code, balance=100)}
    )
    assert output.error is None
    assert output.return_data == word(0)
    assert get_account_optional(state, OTHER) is None


def test_delegatecall_runs_in_the_callers_context() -> None:
    library = assemble(Ops.CALLER, 0, Ops.SSTORE, Ops.ADDRESS) + return_top()
    code = call_other(Ops.DELEGATECALL) + assemble(Ops.POP)
    code += returning_memory()
    output, state = run_code(code, extra_accounts={OTHER: contract(library)})
    assert output.error is None
    assert output.return_data == word(int.from_bytes(CONTRACT, "big"))
    assert get_storage(state, CONTRACT, SLOT) == U256.from_be_bytes(SENDER)
    assert get_storage(state, OTHER, SLOT) == U256(0)


# Deploys the single byte 0x2A.
INIT_CODE = assemble(0x2A, 0, Ops.MSTORE8, 1, 0, Ops.RETURN)


def _init_code_in_memory(init_code: bytes) -> bytes:
    # Right aligned in the first word.
    return assemble(push(int.from_bytes(init_code, "big")), 0, Ops.MSTORE)


def test_create_deploys_the_returned_code() -> None:
    code = _init_code_in_memory(INIT_CODE)
    code += assemble(len(INIT_CODE), 32 - len(INIT_CODE), 0, Ops.CREATE)
    output, state = run_code(code + return_top())

    expected = compute_contract_address(CONTRACT, Uint(1))
    assert output.error is None
    assert output.return_data == word(int.from_bytes(expected, "big"))
    created = get_account(state, expected)
    assert created.code == b"\x2a"
    assert created.nonce == Uint(1)
    assert get_account(state, CONTRACT).nonce == Uint(2)


def test_create2_address_depends_on_salt_and_code() -> None:
    code = _init_code_in_memory(INIT_CODE)
    code += assemble(7, len(INIT_CODE), 32 - len(INIT_CODE), 0, Ops.CREATE2)
    output, state = run_code(code + return_top())

    expected = compute_create2_contract_address(
        CONTRACT, Bytes32(word(7)), INIT_CODE
    )
    assert output.return_data == word(int.from_bytes(expected, "big"))
    assert get_account(state, expected).code == b"\x2a"


def test_create_rejects_code_starting_with_0xef() -> None:
    init_code = assemble(0xEF, 0, Ops.MSTORE8, 1, 0, Ops.RETURN)
    code = _init_code_in_memory(init_code)
    code += assemble(len(init_code), 32 - len(init_code), 0, Ops.CREATE)
    output, state = run_code(code + return_top())

    assert output.error is None
    assert output.return_data == word(0)
    address = compute_contract_address(CONTRACT, Uint(1))
    assert get_account_optional(state, address) is None


def test_selfdestruct_removes_account_created_in_the_same_call() -> None:
    init_code = assemble(0xB0B, Ops.SELFDESTRUCT)
    code = _init_code_in_memory(init_code)
    code += assemble(len(init_code), 32 - len(init_code), 5, Ops.CREATE)
    output, state = run_code(
        code, extra_accounts={CONTRACT: contract(code, balance=100)}
    )

    created = compute_contract_address(CONTRACT, Uint(1))
    assert output.error is None
    assert output.accounts_to_delete == {created}
    assert get_account(state, OTHER).balance == U256(5)


def test_selfdestruct_of_an_older_account_only_moves_the_balance() -> None:
    code = assemble(0xB0B, Ops.SELFDESTRUCT)
    output, state = run_code(
        code, extra_accounts={CONTRACT: contract(code, balance=50)}
    )
    assert output.error is None
    assert output.accounts_to_delete == set()
    assert get_account(state, OTHER).balance == U256(50)
    assert get_account(state, CONTRACT).code == code
    assert get_account(state, CONTRACT).balance == U256(0)
