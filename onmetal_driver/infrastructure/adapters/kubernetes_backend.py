"""
Kubernetes Control Plane Adapter

Architectural Intent:
- Implements BackendClientPort against the onmetal API server
- Machines are custom objects (compute.api.onmetal.de/v1alpha1, "machines");
  ignition secrets are core/v1 Secrets
- Translates ApiException status codes into the port's exception types

Design Decisions:
- The official client is synchronous; every call runs in a worker thread via
  asyncio.to_thread so the event loop keeps serving other requests
- The API objects are injectable, which lets tests pass MagicMock stand-ins
- Secret data crosses the port as bytes and the API as base64 strings
"""

from __future__ import annotations
import asyncio
import base64
import logging
from typing import Any, Callable, Mapping, Optional

from kubernetes import client, config as kube_config
from kubernetes.client.rest import ApiException

from onmetal_driver.domain.ports.backend_client_port import (
    BackendError,
    ObjectAlreadyExistsError,
    ObjectNotFoundError,
)
from onmetal_driver.domain.value_objects.backend_object import (
    MACHINE_KIND,
    SECRET_KIND,
    BackendObject,
)
from onmetal_driver.domain.value_objects.object_key import ObjectKey

logger = logging.getLogger(__name__)

COMPUTE_GROUP = "compute.api.onmetal.de"
COMPUTE_VERSION = "v1alpha1"
MACHINE_PLURAL = "machines"


def label_selector(labels: Optional[Mapping[str, str]]) -> str:
    """Render exact-match labels as a Kubernetes label selector."""
    if not labels:
        return ""
    return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))


def _machine_from_dict(item: Mapping[str, Any]) -> BackendObject:
    metadata = item.get("metadata") or {}
    return BackendObject(
        kind=MACHINE_KIND,
        name=metadata.get("name", ""),
        namespace=metadata.get("namespace", ""),
        labels=dict(metadata.get("labels") or {}),
        body={"spec": item.get("spec") or {}, "status": item.get("status") or {}},
        deletion_requested=bool(metadata.get("deletionTimestamp")),
    )


def _secret_from_model(secret: Any) -> BackendObject:
    metadata = secret.metadata
    data = {k: base64.b64decode(v) for k, v in (secret.data or {}).items()}
    return BackendObject(
        kind=SECRET_KIND,
        name=metadata.name,
        namespace=metadata.namespace,
        labels=dict(metadata.labels or {}),
        body={"data": data},
        deletion_requested=metadata.deletion_timestamp is not None,
    )


def _machine_to_dict(obj: BackendObject) -> dict[str, Any]:
    return {
        "apiVersion": f"{COMPUTE_GROUP}/{COMPUTE_VERSION}",
        "kind": MACHINE_KIND,
        "metadata": {
            "name": obj.name,
            "namespace": obj.namespace,
            "labels": dict(obj.labels),
        },
        "spec": dict(obj.body.get("spec") or {}),
    }


def _secret_to_model(obj: BackendObject) -> Any:
    data = obj.body.get("data") or {}
    return client.V1Secret(
        api_version="v1",
        kind=SECRET_KIND,
        metadata=client.V1ObjectMeta(
            name=obj.name, namespace=obj.namespace, labels=dict(obj.labels)
        ),
        data={k: base64.b64encode(v).decode() for k, v in data.items()},
    )


class KubernetesBackend:
    """
    BackendClientPort backed by the official Kubernetes Python client.

    Configuration parameters
    ------------------------
    api_client : kubernetes.client.ApiClient | None
        Shared, pooled API client.  Built from the default configuration
        when omitted.
    custom_objects / core :
        Pre-built CustomObjectsApi / CoreV1Api instances (used by tests).
    """

    def __init__(
        self,
        api_client: Optional[Any] = None,
        custom_objects: Optional[Any] = None,
        core: Optional[Any] = None,
    ) -> None:
        self._custom = custom_objects or client.CustomObjectsApi(api_client)
        self._core = core or client.CoreV1Api(api_client)

    @classmethod
    def from_kubeconfig(
        cls,
        kubeconfig: str = "",
        context: str = "",
        in_cluster: bool = False,
    ) -> "KubernetesBackend":
        if in_cluster:
            kube_config.load_incluster_config()
        else:
            kube_config.load_kube_config(
                config_file=kubeconfig or None, context=context or None
            )
        logger.debug(
            "KubernetesBackend initialised (kubeconfig=%s, context=%s, in_cluster=%s)",
            kubeconfig or "<default>",
            context or "<current>",
            in_cluster,
        )
        return cls(client.ApiClient())

    # ------------------------------------------------------------------
    # BackendClientPort implementation
    # ------------------------------------------------------------------

    async def get(self, kind: str, key: ObjectKey) -> BackendObject:
        if kind == MACHINE_KIND:
            item = await self._call(
                "get", kind, key,
                self._custom.get_namespaced_custom_object,
                COMPUTE_GROUP, COMPUTE_VERSION, key.namespace, MACHINE_PLURAL, key.name,
            )
            return _machine_from_dict(item)
        if kind == SECRET_KIND:
            secret = await self._call(
                "get", kind, key,
                self._core.read_namespaced_secret, key.name, key.namespace,
            )
            return _secret_from_model(secret)
        raise BackendError(f"unsupported kind {kind!r}")

    async def list(
        self,
        kind: str,
        namespace: str,
        labels: Optional[Mapping[str, str]] = None,
    ) -> list[BackendObject]:
        selector = label_selector(labels)
        scope = ObjectKey(namespace, "*")
        if kind == MACHINE_KIND:
            result = await self._call(
                "list", kind, scope,
                self._custom.list_namespaced_custom_object,
                COMPUTE_GROUP, COMPUTE_VERSION, namespace, MACHINE_PLURAL,
                label_selector=selector,
            )
            return [_machine_from_dict(item) for item in result.get("items") or []]
        if kind == SECRET_KIND:
            result = await self._call(
                "list", kind, scope,
                self._core.list_namespaced_secret, namespace,
                label_selector=selector,
            )
            return [_secret_from_model(item) for item in result.items or []]
        raise BackendError(f"unsupported kind {kind!r}")

    async def create(self, obj: BackendObject) -> BackendObject:
        if obj.kind == MACHINE_KIND:
            item = await self._call(
                "create", obj.kind, obj.key,
                self._custom.create_namespaced_custom_object,
                COMPUTE_GROUP, COMPUTE_VERSION, obj.namespace, MACHINE_PLURAL,
                _machine_to_dict(obj),
            )
            return _machine_from_dict(item)
        if obj.kind == SECRET_KIND:
            secret = await self._call(
                "create", obj.kind, obj.key,
                self._core.create_namespaced_secret, obj.namespace, _secret_to_model(obj),
            )
            return _secret_from_model(secret)
        raise BackendError(f"unsupported kind {obj.kind!r}")

    async def delete(self, kind: str, key: ObjectKey) -> None:
        if kind == MACHINE_KIND:
            await self._call(
                "delete", kind, key,
                self._custom.delete_namespaced_custom_object,
                COMPUTE_GROUP, COMPUTE_VERSION, key.namespace, MACHINE_PLURAL, key.name,
            )
        elif kind == SECRET_KIND:
            await self._call(
                "delete", kind, key,
                self._core.delete_namespaced_secret, key.name, key.namespace,
            )
        else:
            raise BackendError(f"unsupported kind {kind!r}")

    async def _call(
        self,
        verb: str,
        kind: str,
        key: ObjectKey,
        fn: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        logger.debug("Kubernetes %s %s %s", verb, kind, key)
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ApiException as e:
            if e.status == 404:
                raise ObjectNotFoundError(kind, key) from e
            if e.status == 409:
                raise ObjectAlreadyExistsError(kind, key) from e
            raise BackendError(
                f"{verb} {kind.lower()} {key} failed: ({e.status}) {e.reason}"
            ) from e
