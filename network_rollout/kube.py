"""Kubernetes-backed collaborators for the rollout engine."""

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from network_rollout import names
from network_rollout.exceptions import BootstrapError, KubernetesError
from network_rollout.logging_config import get_logger
from network_rollout.models.cluster import ControlPlaneMember, InstallConfig
from network_rollout.models.network import NetworkSpec
from network_rollout.models.tier import Tier, TierState

logger = get_logger(__name__)

TIER_DAEMONSETS = {
    Tier.MASTER: names.MASTER_DAEMONSET,
    Tier.NODE: names.NODE_DAEMONSET,
    Tier.PREPULL: names.PREPULL_DAEMONSET,
}


def load_client_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig.

    Raises:
        KubernetesError: If neither configuration can be loaded
    """
    try:
        config.load_incluster_config()
        logger.debug("Using in-cluster configuration")
        return
    except config.ConfigException:
        pass

    try:
        config.load_kube_config()
        logger.debug("Using kubeconfig")
    except Exception as e:
        raise KubernetesError(
            "Failed to load kubeconfig",
            f"{e}\n\nMake sure the cluster is reachable and KUBECONFIG points to a valid file",
        ) from e


class KubeNodeDirectory:
    """Lists control-plane nodes through the core API."""

    def __init__(self, core_api: client.CoreV1Api, label: str = names.CONTROL_PLANE_LABEL):
        self.core_api = core_api
        self.label = label

    def list_control_plane_nodes(self) -> list[ControlPlaneMember]:
        try:
            nodes = self.core_api.list_node(label_selector=f"{self.label}=")
        except ApiException as e:
            raise KubernetesError(f"Failed to list nodes: {e.reason}", str(e)) from e

        members = []
        for node in nodes.items:
            addresses = (node.status.addresses or []) if node.status else []
            internal_ip = next((a.address for a in addresses if a.type == "InternalIP"), None)
            members.append(ControlPlaneMember(name=node.metadata.name, internal_address=internal_ip))
        return members


class KubeAnnotationStore:
    """Stores state as annotations on the cluster-scoped network configuration object."""

    def __init__(
        self,
        custom_api: client.CustomObjectsApi,
        group: str = names.NETWORK_CONFIG_GROUP,
        version: str = names.NETWORK_CONFIG_VERSION,
        plural: str = names.NETWORK_CONFIG_PLURAL,
        name: str = names.NETWORK_CONFIG_NAME,
    ):
        self.custom_api = custom_api
        self.group = group
        self.version = version
        self.plural = plural
        self.name = name

    def _read(self) -> dict:
        try:
            return self.custom_api.get_cluster_custom_object(
                self.group, self.version, self.plural, self.name
            )
        except ApiException as e:
            raise KubernetesError(
                f"Failed to read {self.plural}.{self.group}/{self.name}: {e.reason}", str(e)
            ) from e

    def get(self, key: str) -> str | None:
        annotations = (self._read().get("metadata") or {}).get("annotations") or {}
        return annotations.get(key)

    def set(self, key: str, value: str) -> None:
        logger.debug(f"Annotating {self.plural}.{self.group}/{self.name} with {key}={value}")
        try:
            self.custom_api.patch_cluster_custom_object(
                self.group,
                self.version,
                self.plural,
                self.name,
                {"metadata": {"annotations": {key: value}}},
            )
        except ApiException as e:
            raise KubernetesError(
                f"Failed to annotate {self.plural}.{self.group}/{self.name}: {e.reason}", str(e)
            ) from e

    def read_network_spec(self) -> NetworkSpec:
        """Return the declared network configuration held by the same object."""
        return NetworkSpec.from_operator_spec(self._read().get("spec") or {})


class KubeCluster:
    """Reads the cluster facts a reconciliation pass needs."""

    def __init__(
        self,
        api_client: client.ApiClient | None = None,
        namespace: str = names.APPLIED_NAMESPACE,
        operator_namespace: str = names.OPERATOR_NAMESPACE,
    ):
        self.api_client = api_client or client.ApiClient()
        self.core_api = client.CoreV1Api(self.api_client)
        self.apps_api = client.AppsV1Api(self.api_client)
        self.custom_api = client.CustomObjectsApi(self.api_client)
        self.namespace = namespace
        self.operator_namespace = operator_namespace

    def read_install_config(self) -> InstallConfig:
        """Read the desired control-plane replica count from the install configuration.

        Raises:
            BootstrapError: If the configuration cannot be read or parsed
        """
        try:
            cm = self.core_api.read_namespaced_config_map(
                names.CLUSTER_CONFIG_NAME, names.CLUSTER_CONFIG_NAMESPACE
            )
        except ApiException as e:
            raise BootstrapError(
                "Unable to bootstrap, unable to retrieve cluster config",
                f"{names.CLUSTER_CONFIG_NAMESPACE}/{names.CLUSTER_CONFIG_NAME}: {e.reason}",
            ) from e

        text = (cm.data or {}).get(names.INSTALL_CONFIG_KEY, "")
        try:
            return InstallConfig.from_yaml(text)
        except Exception as e:
            raise BootstrapError("Unable to bootstrap, unable to parse install-config", str(e)) from e

    def is_external_control_plane(self) -> bool:
        """Return True if the infrastructure reports an externally hosted control plane."""
        try:
            infra = self.custom_api.get_cluster_custom_object(
                names.INFRASTRUCTURE_GROUP,
                names.INFRASTRUCTURE_VERSION,
                names.INFRASTRUCTURE_PLURAL,
                names.INFRASTRUCTURE_NAME,
            )
        except ApiException as e:
            if e.status == 404:
                logger.debug("No infrastructure object found, assuming in-cluster control plane")
                return False
            raise KubernetesError(f"Failed to read infrastructure: {e.reason}", str(e)) from e

        topology = (infra.get("status") or {}).get("controlPlaneTopology", "")
        return topology == names.EXTERNAL_TOPOLOGY_MODE

    def read_tier(self, tier: Tier) -> TierState | None:
        """Read the deployed daemonset for a tier, or None if it does not exist."""
        name = TIER_DAEMONSETS[tier]
        try:
            ds = self.apps_api.read_namespaced_daemon_set(name, self.namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise KubernetesError(
                f"Failed to retrieve existing {tier.value} DaemonSet {self.namespace}/{name}",
                str(e),
            ) from e

        manifest = self.api_client.sanitize_for_serialization(ds)
        return TierState.from_daemonset(tier, ds, manifest=manifest)

    def read_config_map(self, name: str) -> dict[str, str] | None:
        """Read a configuration map from the operator namespace, or None if missing."""
        try:
            cm = self.core_api.read_namespaced_config_map(name, self.operator_namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise KubernetesError(
                f"Failed to read {self.operator_namespace}/{name}: {e.reason}", str(e)
            ) from e
        return dict(cm.data or {})

    def node_directory(self, label: str = names.CONTROL_PLANE_LABEL) -> KubeNodeDirectory:
        return KubeNodeDirectory(self.core_api, label)

    def annotation_store(self) -> KubeAnnotationStore:
        return KubeAnnotationStore(self.custom_api)
