"""Per-step status reporting and host-side errors."""

import enum

import jax.numpy as jnp
from flax.struct import PyTreeNode


class Status(enum.IntEnum):
    """Outcome of a single interpreter step."""
    OK = 0
    HALTED = 1
    UNKNOWN_OPCODE = 2
    STACK_OVERFLOW = 3
    STACK_UNDERFLOW = 4


class StepSignals(PyTreeNode):
    """Side-effect signals produced alongside the updated state."""
    status: jnp.ndarray
    opcode: jnp.ndarray
    display_dirty: jnp.ndarray
    key_wait: jnp.ndarray


def emit(status=Status.OK, display_dirty=False, key_wait=False) -> StepSignals:
    """Build a StepSignals record; opcode is filled in by the dispatcher."""
    return StepSignals(
        status=jnp.asarray(status, dtype=jnp.uint8),
        opcode=jnp.zeros((), dtype=jnp.uint16),
        display_dirty=jnp.asarray(display_dirty, dtype=jnp.bool_),
        key_wait=jnp.asarray(key_wait, dtype=jnp.bool_),
    )


class Chip8Error(Exception):
    """Base class for all chipjax errors."""


class RomLoadError(Chip8Error):
    """ROM file could not be read."""


class RomTooLarge(Chip8Error):
    """ROM does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"ROM is {size} bytes, program space holds at most {limit}")
        self.size = size
        self.limit = limit


class UnknownOpcode(Chip8Error):
    """Decoded instruction has no defined behaviour."""


class StackOverflow(Chip8Error):
    """Subroutine call exceeded the 16-entry stack."""


class StackUnderflow(Chip8Error):
    """Return executed with an empty stack."""


_STATUS_ERRORS = {
    Status.UNKNOWN_OPCODE: UnknownOpcode,
    Status.STACK_OVERFLOW: StackOverflow,
    Status.STACK_UNDERFLOW: StackUnderflow,
}


def raise_for_status(signals: StepSignals) -> None:
    """Raise the matching Chip8Error if any step in ``signals`` reported an anomaly.

    Works on a single step or on signals stacked by ``run_steps``; the first
    anomalous step wins. OK and HALTED are not errors.
    """
    statuses = [int(s) for s in jnp.ravel(signals.status)]
    opcodes = [int(o) for o in jnp.ravel(signals.opcode)]
    for status, opcode in zip(statuses, opcodes):
        error = _STATUS_ERRORS.get(Status(status))
        if error is not None:
            raise error(f"{Status(status).name} at opcode 0x{opcode:04X}")
