import enum
from dataclasses import dataclass
from lendbook.core.models import Role


class Action(enum.Enum):
    BORROW = 'borrow'
    RETURN = 'return'


@dataclass(frozen=True)
class Identity:
    """A resolved, authenticated user."""
    id: str
    name: str
    role: Role = Role.USER

    @property
    def is_admin(self):
        return self.role == Role.ADMIN


def permit(identity: Identity, action: Action, target: str) -> bool:
    """Decides whether `identity` may perform `action`.

    For BORROW, `target` is the holder the loan would be made out to.
    For RETURN, `target` is the holder of the loan being closed.
    Administrators may do both on behalf of anyone; everybody else only
    for themselves.
    """
    if identity is None:
        return False
    if action not in (Action.BORROW, Action.RETURN):
        return False
    return identity.is_admin or target == identity.id
