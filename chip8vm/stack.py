"""CHIP-8 call stack operations.

Both operations assume the pointer has already been validated; overflow and
underflow are detected before dispatch (see ``chip8vm.faults``).
"""

import jax.numpy as jnp
from chip8vm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Store address at the pointer, then increment the pointer.

    The address is kept as is: a return past the end of memory faults on the
    next fetch.
    """
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Decrement the pointer, then read the address it points at."""
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
