"""Tests for the policy resolver — proves it loads and validates the protocol parameters."""

import copy
import json

import pytest
from pathlib import Path

from courier.crypto.field import field_from_text
from courier.policy.resolver import PolicyResolver


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def params() -> dict:
    return json.loads((CONFIG_DIR / "protocol_params.json").read_text(encoding="utf-8"))


@pytest.fixture
def resolver() -> PolicyResolver:
    return PolicyResolver.from_config_dir(CONFIG_DIR)


class TestParameters:
    def test_max_eligible(self, resolver: PolicyResolver) -> None:
        assert resolver.max_eligible() == 100

    def test_nullifier_message(self, resolver: PolicyResolver) -> None:
        assert resolver.nullifier_message() == field_from_text(resolver.nullifier_domain())

    def test_page_limit(self, resolver: PolicyResolver) -> None:
        assert resolver.event_page_limit() > 0

    def test_anchor_policy(self, resolver: PolicyResolver) -> None:
        policy = resolver.anchor_policy()
        assert policy.chain_id == 11155111
        assert policy.gas > 0

    def test_anchor_policy_defaults(self, params: dict) -> None:
        del params["anchoring"]
        assert PolicyResolver(params).anchor_policy().chain_id == 11155111


class TestValidation:
    def test_shipped_config_valid(self, resolver: PolicyResolver) -> None:
        assert resolver.validate() == []

    def test_capacity_above_tree_rejected(self, params: dict) -> None:
        params["registry"]["max_eligible_addresses"] = 257
        with pytest.raises(ValueError, match="max_eligible_addresses"):
            PolicyResolver(params)

    def test_empty_domain_rejected(self, params: dict) -> None:
        params["nullifier"]["domain"] = " "
        with pytest.raises(ValueError, match="nullifier.domain"):
            PolicyResolver(params)

    def test_zero_page_limit_rejected(self, params: dict) -> None:
        params["events"]["page_limit"] = 0
        with pytest.raises(ValueError, match="page_limit"):
            PolicyResolver(params)

    def test_missing_section_rejected(self, params: dict) -> None:
        broken = copy.deepcopy(params)
        del broken["events"]
        with pytest.raises(ValueError, match="missing parameter"):
            PolicyResolver(broken)
