"""CHIP-8 register ALU operations (8XYN).

Each operation receives snapshots of VX and VY and returns ``(result, flag)``.
The handler writes the result to VX first and VF last, so when X or Y is F
the operands are never read after the flag has been written and the flag is
the final value of VF. A ``None`` flag leaves VF untouched.
"""

import jax.numpy as jnp
from chip8vm.constants import FLAG_REGISTER
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    total = jnp.astype(vx, jnp.uint16) + jnp.astype(vy, jnp.uint16)
    carry = total > 0xFF
    return jnp.astype(total & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = 1 when VX > VY."""
    no_borrow = vx > vy
    return vx - vy, no_borrow


def alu_shift_right(source, vy):
    """8XY6 - Shift right, VF = bit shifted out."""
    shifted_bit = source & 1
    return source >> 1, shifted_bit


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when VY > VX."""
    no_borrow = vy > vx
    return vy - vx, no_borrow


def alu_shift_left(source, vy):
    """8XYE - Shift left, VF = bit shifted out."""
    shifted_bit = source >> 7
    return source << 1, shifted_bit


def make_alu_instruction(operation, shift: bool = False):
    """Wrap a pure ALU operation into an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if shift and state.shift_uses_vy:
            vx = vy

        result, flag = operation(vx, vy)

        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right, shift=True)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left, shift=True)
