from enum import Enum


class Action(Enum):
    """Operations the transformer can perform against the repository."""
    ADD = "add"
    CLEAR = "clear"
    GRAPH_QUERY = "graph-query"
    UNRECOGNIZED = None

    @classmethod
    def from_name(cls, name: str) -> "Action":
        """Resolve an action name by exact match, falling back to UNRECOGNIZED."""
        for action in cls:
            if action.value is not None and action.value == name:
                return action
        return cls.UNRECOGNIZED
