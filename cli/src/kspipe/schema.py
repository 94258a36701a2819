"""Resource type descriptors for the types kspipe talks to."""

from __future__ import annotations

from dataclasses import dataclass

PIPELINE_GROUP = "devops.kubesphere.io"
PIPELINE_VERSION = "v1alpha3"
PIPELINE_RESOURCE = "pipelines"
NAMESPACE_RESOURCE = "namespaces"


@dataclass(frozen=True)
class ResourceSchema:
    group: str
    version: str
    resource: str

    @property
    def api_version(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    def __str__(self) -> str:
        if not self.group:
            return self.resource
        return f"{self.resource}.{self.group}"


def pipeline_schema(
    group: str = PIPELINE_GROUP,
    version: str = PIPELINE_VERSION,
    resource: str = PIPELINE_RESOURCE,
) -> ResourceSchema:
    return ResourceSchema(group=group, version=version, resource=resource)


def namespace_schema(resource: str = NAMESPACE_RESOURCE) -> ResourceSchema:
    return ResourceSchema(group="", version="v1", resource=resource)
