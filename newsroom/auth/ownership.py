"""
Ownership policy for mutating owned resources.

One decision function, configured per resource type.  Articles and
comments differ only in their override set:

- articles: nobody overrides; only the author may update or delete,
  whatever their role.
- comments: the author, or any publisher, may delete.

Callers must pass the row they just loaded from the database (or None),
never a cached copy, so the decision always sees the current owner.
"""
from dataclasses import dataclass, field

from newsroom.auth.tokens import Principal, Role
from newsroom.exceptions import ForbiddenError, NotFoundError


def is_permitted(
    principal: Principal,
    owner_id: int,
    override_roles: frozenset[Role] = frozenset(),
) -> bool:
    return principal.id == owner_id or principal.role in override_roles


@dataclass(frozen=True)
class OwnershipPolicy:
    resource: str
    owner_attr: str = "author_id"
    override_roles: frozenset[Role] = field(default_factory=frozenset)

    def enforce(self, principal: Principal, instance) -> None:
        """
        Raise unless *principal* may mutate *instance*.

        Existence is checked before ownership so a caller cannot learn who
        owns a resource that is not there.
        """
        if instance is None:
            raise NotFoundError(self.resource)
        owner_id = getattr(instance, self.owner_attr)
        if not is_permitted(principal, owner_id, self.override_roles):
            raise ForbiddenError(f"Not authorized to modify this {self.resource}")


ARTICLE_POLICY = OwnershipPolicy(resource="article")
# TODO: confirm with product whether publishers should also override
# article edits; comments and articles intentionally disagree today.
COMMENT_POLICY = OwnershipPolicy(resource="comment", override_roles=frozenset({Role.PUBLISHER}))
