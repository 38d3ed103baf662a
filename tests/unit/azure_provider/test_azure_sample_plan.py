"""
Unit tests for the function-app/domain sample plan.

The plan is also executed end to end against an in-memory client to
check creation and teardown order.
"""

import random

import pytest

from cloud_provisioner.core.exceptions import ConfigurationError
from cloud_provisioner.core.executor import PipelineExecutor
from cloud_provisioner.core.models import ResourceKind
from cloud_provisioner.providers.azure.naming import AzureNaming
from cloud_provisioner.providers.azure.sample_plan import (
    STEP_APP_SERVICE_PLAN,
    STEP_DOMAIN,
    STEP_FUNCTION_APP_1,
    STEP_FUNCTION_APP_2,
    STEP_HOSTNAME_BINDING,
    STEP_RESOURCE_GROUP,
    build_sample_plan,
)

EXPECTED_ORDER = [
    STEP_RESOURCE_GROUP,
    STEP_APP_SERVICE_PLAN,
    STEP_FUNCTION_APP_1,
    STEP_FUNCTION_APP_2,
    STEP_DOMAIN,
    STEP_HOSTNAME_BINDING,
]


@pytest.fixture
def naming():
    return AzureNaming(rng=random.Random(42))


class TestBuildSamplePlan:

    def test_six_steps_in_order(self, naming):
        plan = build_sample_plan("eastus", naming)

        assert plan.topological_order() == EXPECTED_ORDER

    def test_specs_use_generated_names(self, naming):
        plan = build_sample_plan("westus", naming)

        assert plan.get_step(STEP_RESOURCE_GROUP).spec.name == naming.resource_group
        assert plan.get_step(STEP_FUNCTION_APP_2).spec.name == naming.function_app_2
        assert plan.get_step(STEP_DOMAIN).spec.kind is ResourceKind.DOMAIN
        assert all(step.spec.region == "westus" for step in plan.steps)

    def test_function_apps_are_separate_resources(self, naming):
        plan = build_sample_plan("eastus", naming)

        app_1 = plan.get_step(STEP_FUNCTION_APP_1)
        app_2 = plan.get_step(STEP_FUNCTION_APP_2)
        assert app_1.spec.name != app_2.spec.name
        assert STEP_APP_SERVICE_PLAN in app_2.depends_on
        assert STEP_FUNCTION_APP_1 not in app_2.depends_on

    def test_binding_depends_on_app_and_domain(self, naming):
        binding = build_sample_plan("eastus", naming).get_step(STEP_HOSTNAME_BINDING)

        assert set(binding.depends_on) == {STEP_RESOURCE_GROUP, STEP_FUNCTION_APP_1, STEP_DOMAIN}
        assert binding.spec.config["host_name"] == naming.host_name
        assert "thumbprint" not in binding.spec.config

    def test_thumbprint_enables_ssl(self, naming):
        binding = build_sample_plan("eastus", naming, certificate_thumbprint="ABC").get_step(
            STEP_HOSTNAME_BINDING
        )

        assert binding.spec.config["thumbprint"] == "ABC"

    def test_invalid_prefix_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_sample_plan("eastus", AzureNaming(prefix="bad_prefix_"))

        assert exc_info.value.key == "RESOURCE_PREFIX"


class TestSamplePlanExecution:

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, naming, fake_client):
        result = await PipelineExecutor().run(build_sample_plan("eastus", naming), fake_client)

        assert result.exit_code == 0
        assert fake_client.deleted == list(reversed(EXPECTED_ORDER))

    @pytest.mark.asyncio
    async def test_second_function_app_failure(self, naming, fake_client):
        fake_client.fail_on_create.add(naming.function_app_2)

        result = await PipelineExecutor().run(build_sample_plan("eastus", naming), fake_client)

        assert result.exit_code == 1
        assert result.creation_error.step == STEP_FUNCTION_APP_2
        assert naming.domain not in fake_client.attempted
        assert fake_client.deleted == [STEP_FUNCTION_APP_1, STEP_APP_SERVICE_PLAN, STEP_RESOURCE_GROUP]
