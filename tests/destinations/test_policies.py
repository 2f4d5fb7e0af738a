from __future__ import annotations

import datetime

import pytest

from etl_sdk.destinations import (
    DefaultRowPolicy,
    DestinationConfig,
    IRowPolicy,
    MappingConfig,
    SCDConfig,
    SCDPolicy,
    SurrogateKeyGenerator,
    UniqueKeyFilter,
    VirtualFieldInjector,
)
from etl_sdk.destinations.policies import SCD_END_OF_TIME, order_from_definition
from etl_sdk.exceptions import ConfigValidationError


def test_surrogate_keys():
    generator = SurrogateKeyGenerator(start=10)
    assert [generator.next(), next(generator), generator.next()] == [10, 11, 12]


def test_unique_filter_pending_keys():
    unique = UniqueKeyFilter(["id", "kind"])

    assert unique.admit({"id": 1, "kind": "a"})
    assert unique.admit({"id": 1, "kind": "b"})
    assert not unique.admit({"id": 1, "kind": "a"})

    unique.rollback()
    assert unique.admit({"id": 1, "kind": "a"})

    unique.commit()
    assert not unique.admit({"id": 1, "kind": "a"})


def test_unique_filter_missing_key_field():
    unique = UniqueKeyFilter(["id"])

    assert unique.admit({"name": "a"})
    assert not unique.admit({"name": "b"})


def test_virtual_fields():
    injector = VirtualFieldInjector(
        {
            "key": SurrogateKeyGenerator,
            "source": "crm",
            "label": lambda row: row["name"].upper(),
        },
    )

    assert injector.augment({"name": "a"}) == {
        "name": "a",
        "key": 1,
        "source": "crm",
        "label": "A",
    }
    assert injector.augment({"name": "b", "source": "erp"})["source"] == "erp"
    assert injector.augment({"name": "c"})["key"] == 3


def test_virtual_named_generator():
    injector = VirtualFieldInjector(
        {"id": {"generator": "surrogate_key", "start": 100}},
    )

    assert injector.augment({})["id"] == 100
    assert injector.augment({})["id"] == 101


def test_virtual_unknown_generator():
    with pytest.raises(ConfigValidationError, match="Unknown generator 'uuid'"):
        VirtualFieldInjector({"id": {"generator": "uuid"}})


def test_scd_type_1_is_a_no_op():
    scd = SCDPolicy(SCDConfig(type=1))

    assert scd.required_fields == ()
    assert scd.augment({"id": 1}) == {"id": 1}


def test_scd_type_2_fields():
    effective_at = datetime.datetime(2024, 1, 2, tzinfo=datetime.timezone.utc)
    scd = SCDPolicy(SCDConfig(), effective_at=effective_at)

    assert scd.required_fields == ("effective_date", "end_date", "latest_version")
    assert scd.augment({"id": 1}) == {
        "id": 1,
        "effective_date": effective_at,
        "end_date": SCD_END_OF_TIME,
        "latest_version": True,
    }

    explicit = datetime.datetime(2020, 5, 1, tzinfo=datetime.timezone.utc)
    row = scd.augment({"id": 2, "effective_date": explicit})
    assert row["effective_date"] == explicit


def test_order_from_definition():
    assert order_from_definition(None) is None
    assert order_from_definition(["id", {"name": "name", "type": "string"}]) == [
        "id",
        "name",
    ]

    with pytest.raises(ConfigValidationError, match="no name"):
        order_from_definition([{"type": "string"}])


def test_default_policy():
    config = DestinationConfig(
        target="warehouse",
        table="people",
        unique=("id",),
        scd=SCDConfig(),
    )
    policy = DefaultRowPolicy.from_config(
        config,
        MappingConfig(virtual={"source": "crm"}),
        source_definition=["id", "name"],
    )

    assert isinstance(policy, IRowPolicy)
    assert policy.infer_order() == ["id", "name"]
    assert policy.required_fields == (
        "effective_date",
        "end_date",
        "latest_version",
    )

    assert policy.admit({"id": 1})
    row = policy.augment({"id": 1})
    assert row["source"] == "crm"
    assert row["latest_version"] is True

    policy.commit()
    assert not policy.admit({"id": 1})


def test_default_policy_admits_everything_without_unique_key():
    policy = DefaultRowPolicy()

    assert policy.admit({"id": 1})
    assert policy.admit({"id": 1})
    assert policy.required_fields == ()
    assert policy.infer_order() is None
