"""Unit tests for Azure resource naming."""

import random

import pytest

from cloud_provisioner.providers.azure.naming import (
    AzureNaming,
    create_random_name,
    is_valid_site_name,
)


class TestCreateRandomName:

    def test_pads_to_max_length(self):
        name = create_random_name("plan-", rng=random.Random(1))

        assert name.startswith("plan-")
        assert len(name) == 20
        assert name[len("plan-"):].isdigit()

    def test_long_prefix_still_gets_digits(self):
        name = create_random_name("a-very-long-prefix-indeed-", rng=random.Random(1))

        assert len(name) == len("a-very-long-prefix-indeed-") + 5

    def test_seeded_rng_is_deterministic(self):
        assert create_random_name("x", rng=random.Random(7)) == create_random_name("x", rng=random.Random(7))


class TestAzureNaming:

    def test_sample_prefixes(self):
        naming = AzureNaming(rng=random.Random(3))

        assert naming.resource_group.startswith("rgNEMV_")
        assert naming.app_service_plan.startswith("plan-")
        assert naming.function_app_1.startswith("webapp1-")
        assert naming.function_app_2.startswith("webapp2-")
        assert naming.domain.startswith("jsdkdemo-")
        assert naming.domain.endswith(".com")

    def test_function_apps_are_distinct(self):
        naming = AzureNaming()

        assert naming.function_app_1 != naming.function_app_2

    def test_host_name_under_domain(self):
        naming = AzureNaming(rng=random.Random(3))

        assert naming.host_name == f"{naming.function_app_1}.{naming.domain}"

    def test_names_are_stable(self):
        naming = AzureNaming()

        assert naming.resource_group == naming.resource_group
        assert naming.domain == naming.domain

    def test_prefix_is_prepended(self):
        naming = AzureNaming(prefix="ci-")

        assert naming.function_app_1.startswith("ci-webapp1-")
        assert naming.resource_group.startswith("ci-rgNEMV_")


@pytest.mark.parametrize("name,valid", [
    ("webapp1-12345", True),
    ("ab", True),
    ("-leading", False),
    ("trailing-", False),
    ("under_score", False),
    ("a" * 61, False),
])
def test_is_valid_site_name(name, valid):
    assert is_valid_site_name(name) is valid
