import asyncio

import pytest

from cloud_provisioner import constants as CONSTANTS
from cloud_provisioner.core.models import ResourceHandle, ResourceKind, ResourceSpec
from cloud_provisioner.core.plan import ProvisioningPlan


class FakeResourceClient:
    """
    In-memory ResourceClient with failure injection.

    Attributes:
        attempted: spec names whose creation was started
        created: spec names created successfully, in completion order
        delete_attempts / deleted: step names, in call order
        fail_on_create: spec names (or ResourceKinds) that fail to create
        fail_on_delete: step names that fail to delete
        gates: spec name (or ResourceKind) -> asyncio.Event the creation waits on
        started: spec name (or ResourceKind) -> asyncio.Event set when creation begins
        delete_gates / delete_started: the same for deletions, keyed by step name
    """

    def __init__(self):
        self.attempted = []
        self.created = []
        self.delete_attempts = []
        self.deleted = []
        self.dependencies_seen = {}
        self.fail_on_create = set()
        self.fail_on_delete = set()
        self.gates = {}
        self.started = {}
        self.delete_gates = {}
        self.delete_started = {}
        self.in_flight = 0
        self.max_in_flight = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def create_or_update(self, spec, dependencies):
        self.attempted.append(spec.name)
        self.dependencies_seen[spec.name] = dict(dependencies)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            started = self.started.get(spec.name, self.started.get(spec.kind))
            if started is not None:
                started.set()
            gate = self.gates.get(spec.name, self.gates.get(spec.kind))
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
            if spec.name in self.fail_on_create or spec.kind in self.fail_on_create:
                raise RuntimeError(f"quota exceeded for {spec.name}")
            self.created.append(spec.name)
            return ResourceHandle(
                step_name=spec.name,
                kind=spec.kind,
                name=spec.name,
                resource_id=f"/fake/{spec.kind.value}/{spec.name}",
            )
        finally:
            self.in_flight -= 1

    async def delete(self, handle):
        self.delete_attempts.append(handle.step_name)
        if handle.step_name in self.delete_started:
            self.delete_started[handle.step_name].set()
        gate = self.delete_gates.get(handle.step_name)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if handle.step_name in self.fail_on_delete:
            raise RuntimeError(f"delete refused for {handle.step_name}")
        self.deleted.append(handle.step_name)


@pytest.fixture(scope="function", autouse=True)
def clear_env_vars(monkeypatch):
    """Remove real credentials from the environment to prevent accidental cloud calls."""
    for key in CONSTANTS.REQUIRED_SETTINGS + [
        "REGION", "MODE", "OPERATION_TIMEOUT_SECONDS", "RESOURCE_PREFIX", "CERTIFICATE_THUMBPRINT"
    ]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def azure_env(monkeypatch):
    """Set a complete, fake service principal configuration."""
    monkeypatch.setenv("TENANT_ID", "00000000-0000-0000-0000-000000000001")
    monkeypatch.setenv("CLIENT_ID", "00000000-0000-0000-0000-000000000002")
    monkeypatch.setenv("CLIENT_SECRET", "not-a-real-secret")
    monkeypatch.setenv("SUBSCRIPTION_ID", "00000000-0000-0000-0000-000000000003")


@pytest.fixture
def fake_client():
    return FakeResourceClient()


@pytest.fixture
def make_spec():
    def _make(name, kind=ResourceKind.FUNCTION_APP, region="eastus", **config):
        return ResourceSpec(kind=kind, name=name, region=region, config=config)
    return _make


@pytest.fixture
def linear_plan(make_spec):
    """A <- B <- C"""
    plan = ProvisioningPlan()
    plan.add_step(make_spec("A", ResourceKind.RESOURCE_GROUP))
    plan.add_step(make_spec("B", ResourceKind.APP_SERVICE_PLAN), depends_on=["A"])
    plan.add_step(make_spec("C"), depends_on=["B"])
    return plan
