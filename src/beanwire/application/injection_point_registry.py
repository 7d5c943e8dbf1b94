"""Application layer - Injection points of one managed type."""

from typing import Iterable, Iterator, List, Tuple

from beanwire.domain import InjectionPoint, MemberKind, MemberRole, MetaClass, MetaMember


class InjectionPointRegistry:
    """Immutable, ordered set of the injection points of a managed type.

    Points are kept in a stable order: constructor parameters, then fields,
    then method parameters. Duplicates are dropped on construction.

    Attributes:
        _points: The registered injection points.
    """

    def __init__(self, points: Iterable[InjectionPoint]) -> None:
        self._points: Tuple[InjectionPoint, ...] = tuple(dict.fromkeys(points))

    @classmethod
    def from_meta_class(cls, meta_class: MetaClass) -> "InjectionPointRegistry":
        """Collect every injection point declared by a descriptor.

        Args:
            meta_class: Descriptor of the managed type.

        Returns:
            Registry holding constructor, field and method parameter points.
        """
        constructor = meta_class.constructor
        points: List[InjectionPoint] = [
            InjectionPoint(member=constructor, element=parameter) for parameter in constructor.parameters
        ]
        points.extend(InjectionPoint(member=field, element=field) for field in meta_class.injected_fields)
        for method in meta_class.methods:
            if method.has_role(MemberRole.INJECT) or method.is_producer_or_disposer:
                points.extend(InjectionPoint(member=method, element=parameter) for parameter in method.parameters)
        return cls(points)

    @property
    def points(self) -> Tuple[InjectionPoint, ...]:
        return self._points

    def for_member(self, member: MetaMember) -> Tuple[InjectionPoint, ...]:
        """Return the points owned by ``member``, in registry order."""
        return tuple(point for point in self._points if point.member == member)

    def field_points(self) -> Tuple[InjectionPoint, ...]:
        return tuple(point for point in self._points if point.member.kind is MemberKind.FIELD)

    def __iter__(self) -> Iterator[InjectionPoint]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)
