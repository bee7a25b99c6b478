from typing import Type, TypeVar

from esper import World

T = TypeVar("T")


def get_singleton(world: World, comp_type: Type[T]) -> T:
    """Return the one instance of a session-wide component."""
    for _, component in world.get_component(comp_type):
        return component
    raise RuntimeError(f"{comp_type.__name__} not found")


def replace_singleton(world: World, component: T) -> T:
    """Swap the session-wide instance of ``type(component)`` for a fresh one."""
    comp_type = type(component)
    for entity, _ in world.get_component(comp_type):
        world.add_component(entity, component)
        return component
    world.create_entity(component)
    return component
