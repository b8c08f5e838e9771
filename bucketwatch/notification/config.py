from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, final
from xml.etree import ElementTree

from bucketwatch.exceptions import TargetFrozenError, UnknownTargetError

S3_XMLNS = "http://s3.amazonaws.com/doc/2006-03-01/"


@final
@dataclass(frozen=True)
class FilterRule:
    kind: Literal["prefix", "suffix"]
    value: str


@final
@dataclass(frozen=True)
class EventFilter:
    """Object key rules a notification is restricted to.

    Rules are kept in the order they were added, duplicates included. The order is
    preserved on the wire, so it is never sorted.
    """

    rules: tuple[FilterRule, ...] = ()

    def with_rule(self, kind: Literal["prefix", "suffix"], value: str) -> "EventFilter":
        return EventFilter((*self.rules, FilterRule(kind, value)))

    def to_dict(self) -> dict[str, Any]:
        rules = [{"Name": rule.kind, "Value": rule.value} for rule in self.rules]
        return {"S3Key": {"FilterRule": rules}}


class TargetKind(Enum):
    """Notification destination type with its configuration tag and ARN key."""

    TOPIC = ("TopicConfiguration", "Topic")
    QUEUE = ("QueueConfiguration", "Queue")
    CLOUD_FUNCTION = ("CloudFunctionConfiguration", "CloudFunction")

    def __init__(self, tag: str, arn_key: str):
        self.tag = tag
        self.arn_key = arn_key


@final
class TargetConfig:
    """One notification destination together with the events and key filter it receives.

    Create instances through `TargetConfig.topic`, `TargetConfig.queue` or
    `TargetConfig.cloud_function` (also exported as `TopicConfig`, `QueueConfig` and
    `CloudFunctionConfig`). The ARN is fixed at construction. Everything else can be
    changed until the target is added to a `NotificationConfig`, after which the
    target is frozen and the mutators raise `TargetFrozenError`.

    Example:
    ```python
    queue = QueueConfig(build_arn("minio", "sqs", "us-east-1", "1", "webhook"))
    queue.add_event(OBJECT_CREATED_ALL)
    queue.add_filter_suffix(".jpg")
    ```
    """

    def __init__(self, kind: TargetKind, arn: str):
        self._kind = kind
        self._arn = arn
        self._id: str | None = None
        self._events: list[str] = []
        self._filter: EventFilter | None = None
        self._frozen = False

    @classmethod
    def topic(cls, arn: str) -> "TargetConfig":
        return cls(TargetKind.TOPIC, arn)

    @classmethod
    def queue(cls, arn: str) -> "TargetConfig":
        return cls(TargetKind.QUEUE, arn)

    @classmethod
    def cloud_function(cls, arn: str) -> "TargetConfig":
        return cls(TargetKind.CLOUD_FUNCTION, arn)

    @property
    def kind(self) -> TargetKind:
        return self._kind

    @property
    def arn(self) -> str:
        return self._arn

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def events(self) -> tuple[str, ...]:
        return tuple(self._events)

    @property
    def filter(self) -> EventFilter | None:
        return self._filter

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def set_id(self, id_: str) -> None:
        self._check_mutable()
        self._id = id_

    def add_event(self, event: str) -> None:
        self._check_mutable()
        self._events.append(event)

    def add_filter_prefix(self, prefix: str) -> None:
        self._add_filter_rule("prefix", prefix)

    def add_filter_suffix(self, suffix: str) -> None:
        self._add_filter_rule("suffix", suffix)

    def _add_filter_rule(self, kind: Literal["prefix", "suffix"], value: str) -> None:
        self._check_mutable()
        self._filter = (self._filter or EventFilter()).with_rule(kind, value)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TargetFrozenError(self._arn)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self._id is not None:
            data["Id"] = self._id
        data[self._kind.arn_key] = self._arn
        if self._events:
            data["Event"] = list(self._events)
        if self._filter is not None:
            data["Filter"] = self._filter.to_dict()
        return data

    def __repr__(self) -> str:
        return f"TargetConfig({self._kind.name}, {self._arn!r}, events={self._events!r})"


TopicConfig = TargetConfig.topic
QueueConfig = TargetConfig.queue
CloudFunctionConfig = TargetConfig.cloud_function


@final
class NotificationConfig:
    """Bucket notification configuration, targets grouped by destination type.

    A group only exists once a target of its type was added. Adding a target freezes
    it, so the configuration can't change behind the caller's back once built.
    """

    def __init__(self) -> None:
        self._groups: dict[TargetKind, list[TargetConfig]] = {}

    def add(self, target: TargetConfig) -> None:
        if not isinstance(target, TargetConfig):
            raise UnknownTargetError(target)
        self._groups.setdefault(target.kind, []).append(target)
        target.freeze()

    @property
    def configurations(self) -> dict[str, tuple[TargetConfig, ...]]:
        """Targets keyed by configuration tag, in wire order, present tags only."""
        return {
            kind.tag: tuple(self._groups[kind]) for kind in TargetKind if kind in self._groups
        }

    @property
    def topics(self) -> tuple[TargetConfig, ...]:
        return tuple(self._groups.get(TargetKind.TOPIC, ()))

    @property
    def queues(self) -> tuple[TargetConfig, ...]:
        return tuple(self._groups.get(TargetKind.QUEUE, ()))

    @property
    def cloud_functions(self) -> tuple[TargetConfig, ...]:
        return tuple(self._groups.get(TargetKind.CLOUD_FUNCTION, ()))

    def __len__(self) -> int:
        return sum(len(targets) for targets in self._groups.values())

    def __iter__(self) -> Iterator[TargetConfig]:
        for targets in self.configurations.values():
            yield from targets

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            tag: [target.to_dict() for target in targets]
            for tag, targets in self.configurations.items()
        }

    def to_xml(self) -> bytes:
        """Serialize to the S3 NotificationConfiguration document."""
        root = ElementTree.Element("NotificationConfiguration", xmlns=S3_XMLNS)
        for tag, targets in self.to_dict().items():
            for target in targets:
                _append_xml(ElementTree.SubElement(root, tag), target)
        return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)


def _append_xml(parent: ElementTree.Element, data: dict[str, Any]) -> None:
    for key, value in data.items():
        # Lists repeat the element, e.g. one <Event> per event name
        for item in value if isinstance(value, list) else [value]:
            child = ElementTree.SubElement(parent, key)
            if isinstance(item, dict):
                _append_xml(child, item)
            else:
                child.text = str(item)


def build_arn(partition: str, service: str, region: str, account_id: str, resource: str) -> str:
    """Build an ARN like ``arn:aws:sns:us-east-1:123456789012:mytopic``.

    Components are joined as given, without validation.
    """
    return f"arn:{partition}:{service}:{region}:{account_id}:{resource}"
