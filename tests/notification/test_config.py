"""Tests for building bucket notification configurations."""

from xml.etree import ElementTree

import pytest

from bucketwatch.exceptions import TargetFrozenError, UnknownTargetError
from bucketwatch.notification import (
    KNOWN_EVENTS,
    OBJECT_CREATED_ALL,
    OBJECT_CREATED_PUT,
    OBJECT_REDUCED_REDUNDANCY_LOST_OBJECT,
    OBJECT_REMOVED_ALL,
    OBJECT_REMOVED_DELETE,
    CloudFunctionConfig,
    EventFilter,
    FilterRule,
    NotificationConfig,
    QueueConfig,
    TargetConfig,
    TargetKind,
    TopicConfig,
    build_arn,
)
from bucketwatch.notification.config import S3_XMLNS

TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:mytopic"
QUEUE_ARN = "arn:minio:sqs:us-east-1:1:webhook"
FUNCTION_ARN = "arn:aws:lambda:us-east-1:123456789012:function:resize"


# =============================================================================
# ARN and event names
# =============================================================================


def test_build_arn():
    assert build_arn("aws", "sns", "us-east-1", "123456789012", "mytopic") == TOPIC_ARN


def test_build_arn_does_not_validate_components():
    assert build_arn("", "sqs", "", "1", "a:b") == "arn::sqs::1:a:b"


def test_known_events():
    assert len(KNOWN_EVENTS) == 9
    assert OBJECT_CREATED_ALL == "s3:ObjectCreated:*"
    assert OBJECT_REMOVED_ALL == "s3:ObjectRemoved:*"
    assert OBJECT_REDUCED_REDUNDANCY_LOST_OBJECT == "s3:ReducedRedundancyLostObject"
    assert all(event.startswith("s3:") for event in KNOWN_EVENTS)


# =============================================================================
# Target configs
# =============================================================================


@pytest.mark.parametrize(
    ("constructor", "kind"),
    [
        (TopicConfig, TargetKind.TOPIC),
        (QueueConfig, TargetKind.QUEUE),
        (CloudFunctionConfig, TargetKind.CLOUD_FUNCTION),
    ],
)
def test_constructors_set_kind_and_arn(constructor, kind):
    target = constructor("arn:x")

    assert isinstance(target, TargetConfig)
    assert target.kind is kind
    assert target.arn == "arn:x"
    assert target.id is None
    assert target.events == ()
    assert target.filter is None


def test_arn_cannot_be_reassigned():
    target = TopicConfig(TOPIC_ARN)

    with pytest.raises(AttributeError):
        target.arn = "arn:other"


def test_set_id_last_write_wins():
    target = QueueConfig(QUEUE_ARN)
    target.set_id("first")
    target.set_id("second")

    assert target.id == "second"


def test_events_keep_call_order_and_duplicates():
    target = QueueConfig(QUEUE_ARN)
    for event in [OBJECT_REMOVED_DELETE, OBJECT_CREATED_PUT, "custom:event", OBJECT_CREATED_PUT]:
        target.add_event(event)

    assert target.events == (
        OBJECT_REMOVED_DELETE,
        OBJECT_CREATED_PUT,
        "custom:event",
        OBJECT_CREATED_PUT,
    )


def test_filter_rules_keep_call_order_and_interleave():
    target = TopicConfig(TOPIC_ARN)
    target.add_filter_suffix(".jpg")
    target.add_filter_prefix("photos/")
    target.add_filter_suffix(".png")
    target.add_filter_suffix(".jpg")

    assert target.filter == EventFilter(
        (
            FilterRule("suffix", ".jpg"),
            FilterRule("prefix", "photos/"),
            FilterRule("suffix", ".png"),
            FilterRule("suffix", ".jpg"),
        )
    )


def test_target_to_dict():
    target = CloudFunctionConfig(FUNCTION_ARN)
    target.set_id("resize")
    target.add_event(OBJECT_CREATED_ALL)
    target.add_filter_prefix("uploads/")

    assert target.to_dict() == {
        "Id": "resize",
        "CloudFunction": FUNCTION_ARN,
        "Event": [OBJECT_CREATED_ALL],
        "Filter": {"S3Key": {"FilterRule": [{"Name": "prefix", "Value": "uploads/"}]}},
    }


def test_target_to_dict_omits_unset_fields():
    assert QueueConfig(QUEUE_ARN).to_dict() == {"Queue": QUEUE_ARN}


# =============================================================================
# Notification config
# =============================================================================


def test_add_routes_each_kind_to_its_own_group():
    config = NotificationConfig()
    topic = TopicConfig(TOPIC_ARN)
    queue = QueueConfig(QUEUE_ARN)
    function = CloudFunctionConfig(FUNCTION_ARN)

    config.add(queue)
    config.add(function)
    config.add(topic)

    assert config.topics == (topic,)
    assert config.queues == (queue,)
    assert config.cloud_functions == (function,)
    assert config.configurations == {
        "TopicConfiguration": (topic,),
        "QueueConfiguration": (queue,),
        "CloudFunctionConfiguration": (function,),
    }


def test_add_accumulates_targets_of_the_same_kind():
    config = NotificationConfig()
    first = QueueConfig(QUEUE_ARN)
    second = QueueConfig("arn:minio:sqs:us-east-1:2:kafka")

    config.add(first)
    config.add(second)

    assert config.queues == (first, second)
    assert len(config) == 2
    assert list(config) == [first, second]


def test_groups_only_exist_after_first_insert():
    config = NotificationConfig()
    assert config.configurations == {}

    config.add(TopicConfig(TOPIC_ARN))

    assert list(config.configurations) == ["TopicConfiguration"]


@pytest.mark.parametrize("target", [None, "arn:aws:sns:::t", {"Topic": TOPIC_ARN}, EventFilter()])
def test_add_rejects_unknown_targets(target):
    config = NotificationConfig()

    with pytest.raises(UnknownTargetError):
        config.add(target)
    assert config.configurations == {}


def test_unknown_target_error_is_a_type_error():
    with pytest.raises(TypeError, match="Cannot add 'str'"):
        NotificationConfig().add("arn")


def test_targets_are_frozen_once_added():
    target = TopicConfig(TOPIC_ARN)
    target.add_event(OBJECT_CREATED_ALL)
    NotificationConfig().add(target)

    assert target.frozen
    for mutate in [
        lambda: target.set_id("x"),
        lambda: target.add_event(OBJECT_REMOVED_ALL),
        lambda: target.add_filter_prefix("a/"),
        lambda: target.add_filter_suffix(".b"),
    ]:
        with pytest.raises(TargetFrozenError):
            mutate()
    assert target.events == (OBJECT_CREATED_ALL,)


def test_to_xml():
    config = NotificationConfig()
    queue = QueueConfig(QUEUE_ARN)
    queue.set_id("webhook")
    queue.add_event(OBJECT_CREATED_PUT)
    queue.add_event(OBJECT_REMOVED_DELETE)
    queue.add_filter_prefix("photos/")
    queue.add_filter_suffix(".jpg")
    config.add(queue)
    config.add(TopicConfig(TOPIC_ARN))

    root = ElementTree.fromstring(config.to_xml())
    ns = {"s3": S3_XMLNS}

    assert root.tag == f"{{{S3_XMLNS}}}NotificationConfiguration"
    assert [child.tag.split("}")[1] for child in root] == [
        "TopicConfiguration",
        "QueueConfiguration",
    ]
    queue_element = root.find("s3:QueueConfiguration", ns)
    assert queue_element.findtext("s3:Id", namespaces=ns) == "webhook"
    assert queue_element.findtext("s3:Queue", namespaces=ns) == QUEUE_ARN
    assert [e.text for e in queue_element.findall("s3:Event", ns)] == [
        OBJECT_CREATED_PUT,
        OBJECT_REMOVED_DELETE,
    ]
    rules = queue_element.findall("s3:Filter/s3:S3Key/s3:FilterRule", ns)
    assert [
        (r.findtext("s3:Name", namespaces=ns), r.findtext("s3:Value", namespaces=ns))
        for r in rules
    ] == [("prefix", "photos/"), ("suffix", ".jpg")]


def test_empty_config_to_xml():
    root = ElementTree.fromstring(NotificationConfig().to_xml())

    assert root.tag == f"{{{S3_XMLNS}}}NotificationConfiguration"
    assert list(root) == []
