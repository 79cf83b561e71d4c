from itertools import chain
from typing import Dict, List


class InstanceTypes(object):
    """
    Catalogue of instance types for one service, grouped by family. Obsolete types are
    still accepted by the service but are not offered as defaults.
    """
    def __init__(self, current_generation: Dict[str, List[str]], obsolete: List[str]):
        self.current_generation = current_generation
        self.obsolete = obsolete

    @property
    def current(self) -> List[str]:
        ret = list(chain.from_iterable(self.current_generation.values()))
        return ret

    @property
    def default(self) -> str:
        return self.current_generation["general_purpose"][0]

    def is_supported(self, instance_type: str) -> bool:
        return instance_type in self.current or self.is_obsolete(instance_type)

    def is_obsolete(self, instance_type: str) -> bool:
        return instance_type in self.obsolete

    def allowed_values(self, instance_type: str) -> List[str]:
        ret = self.current
        if self.is_obsolete(instance_type):
            ret.append(instance_type)
        return ret


EC2 = InstanceTypes(
    current_generation={
        "general_purpose": ["t2.micro", "t2.small", "t2.medium", "t2.large",
                            "m4.large", "m4.xlarge", "m4.2xlarge", "m4.4xlarge", "m4.10xlarge",
                            "m3.medium", "m3.large", "m3.xlarge", "m3.2xlarge"],
        "compute_optimized": ["c4.large", "c4.xlarge", "c4.2xlarge", "c4.4xlarge", "c4.8xlarge",
                              "c3.large", "c3.xlarge", "c3.2xlarge", "c3.4xlarge", "c3.8xlarge"],
        "memory_optimized": ["r3.large", "r3.xlarge", "r3.2xlarge", "r3.4xlarge", "r3.8xlarge"],
        "storage_optimized": ["i2.xlarge", "i2.2xlarge", "i2.4xlarge", "i2.8xlarge",
                              "d2.xlarge", "d2.2xlarge", "d2.4xlarge", "d2.8xlarge"],
        "gpu": ["g2.2xlarge", "g2.8xlarge"],
    },
    obsolete=["t1.micro", "m1.small", "m1.medium", "m1.large", "m1.xlarge",
              "c1.medium", "c1.xlarge", "cc2.8xlarge", "cg1.4xlarge",
              "m2.xlarge", "m2.2xlarge", "m2.4xlarge", "cr1.8xlarge",
              "hi1.4xlarge", "hs1.8xlarge"],
)

RDS = InstanceTypes(
    current_generation={
        "general_purpose": ["db.m3.medium", "db.m3.large", "db.m3.xlarge", "db.m3.2xlarge",
                            "db.m4.large", "db.m4.xlarge", "db.m4.2xlarge", "db.m4.4xlarge", "db.m4.10xlarge"],
        "burstable": ["db.t2.micro", "db.t2.small", "db.t2.medium", "db.t2.large"],
        "memory_optimized": ["db.r3.large", "db.r3.xlarge", "db.r3.2xlarge", "db.r3.4xlarge", "db.r3.8xlarge"],
    },
    obsolete=["db.t1.micro", "db.m1.small", "db.m1.medium", "db.m1.large", "db.m1.xlarge",
              "db.m2.xlarge", "db.m2.2xlarge", "db.m2.4xlarge", "db.cr1.8xlarge"],
)
