"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.signals import Status, StepSignals, emit
from chipjax.stack import pop


def unknown_opcode(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """Undefined encoding: report it and leave state as is."""
    return state, emit(Status.UNKNOWN_OPCODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display)), emit(display_dirty=True)


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """00EE - Return from subroutine."""
    stack, address, ok = pop(state.stack)
    status = jnp.where(ok, int(Status.OK), int(Status.STACK_UNDERFLOW))
    return state.replace(stack=stack, pc=jnp.where(ok, address, state.pc)), emit(status)


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """Dispatch system instructions."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            unknown_opcode,
            state, instruction
        ),
        state, instruction
    )
