"""
Azure resource naming for the function-app sample.

Every run gets fresh, random resource names so repeated runs (and runs
whose teardown failed) never collide in the same subscription.

Naming Convention:
    - Resource Group: rgNEMV_{digits}
    - App Service Plan: plan-{digits}
    - Function Apps: webapp1-{digits}, webapp2-{digits}
    - Domain: jsdkdemo-{digits}.com
    - Host name: {function_app_1}.{domain}

    An optional prefix (RESOURCE_PREFIX) is prepended to each name, e.g.
    to make leftovers easy to find.

Usage:
    naming = AzureNaming()
    naming.resource_group  # "rgNEMV_48213907531"
"""

import random
import re
import string
from typing import Optional

from cloud_provisioner import constants as CONSTANTS

# Azure site names: 2-60 chars, alphanumeric and hyphens
_SITE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{0,58}[A-Za-z0-9]$")


def create_random_name(
    prefix: str,
    max_length: int = CONSTANTS.RANDOM_NAME_MAX_LENGTH,
    rng: Optional[random.Random] = None
) -> str:
    """
    Append random digits to prefix, up to max_length characters.

    At least five digits are always added, so a long prefix may push the
    result past max_length.
    """
    rng = rng or random.Random()
    digit_count = max(max_length - len(prefix), 5)
    return prefix + "".join(rng.choice(string.digits) for _ in range(digit_count))


def is_valid_site_name(name: str) -> bool:
    return bool(_SITE_NAME_PATTERN.match(name))


class AzureNaming:
    """
    Generates the resource names for one sample run.

    Names are generated once in the constructor and stay fixed, so the
    plan, the logs and the teardown all refer to the same resources.

    Attributes:
        prefix: Optional prefix prepended to every generated name
    """

    def __init__(self, prefix: str = "", rng: Optional[random.Random] = None):
        self.prefix = prefix
        rng = rng or random.Random()

        self._resource_group = create_random_name(prefix + CONSTANTS.RESOURCE_GROUP_PREFIX, rng=rng)
        self._plan = create_random_name(prefix + CONSTANTS.APP_SERVICE_PLAN_PREFIX, rng=rng)
        self._function_app_1 = create_random_name(prefix + CONSTANTS.FUNCTION_APP_1_PREFIX, rng=rng)
        self._function_app_2 = create_random_name(prefix + CONSTANTS.FUNCTION_APP_2_PREFIX, rng=rng)
        domain_label = create_random_name(prefix + CONSTANTS.DOMAIN_PREFIX, rng=rng)
        self._domain = f"{domain_label}.{CONSTANTS.DOMAIN_TLD}"

    @property
    def resource_group(self) -> str:
        return self._resource_group

    @property
    def app_service_plan(self) -> str:
        return self._plan

    @property
    def function_app_1(self) -> str:
        return self._function_app_1

    @property
    def function_app_2(self) -> str:
        return self._function_app_2

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def host_name(self) -> str:
        """Custom host name bound to the first function app."""
        return f"{self._function_app_1}.{self._domain}"
