"""Well-known object names, labels and annotation keys."""

# Namespace and objects owned by the datapath
APPLIED_NAMESPACE = "openshift-ovn-kubernetes"
MASTER_DAEMONSET = "ovnkube-master"
NODE_DAEMONSET = "ovnkube-node"
PREPULL_DAEMONSET = "ovnkube-upgrades-prepuller"

# Operator-side configuration
OPERATOR_NAMESPACE = "openshift-network-operator"
CLUSTER_CONFIG_NAME = "cluster-config-v1"
CLUSTER_CONFIG_NAMESPACE = "kube-system"
INSTALL_CONFIG_KEY = "install-config"
NODE_MODE_CONFIGMAP = "dpu-mode-config"
GATEWAY_MODE_CONFIGMAP = "gateway-mode-config"
FLOWS_CONFIGMAP = "ovs-flows-config"

# Owning configuration object for the persisted annotations
NETWORK_CONFIG_GROUP = "operator.openshift.io"
NETWORK_CONFIG_VERSION = "v1"
NETWORK_CONFIG_PLURAL = "networks"
NETWORK_CONFIG_NAME = "cluster"

INFRASTRUCTURE_GROUP = "config.openshift.io"
INFRASTRUCTURE_VERSION = "v1"
INFRASTRUCTURE_PLURAL = "infrastructures"
INFRASTRUCTURE_NAME = "cluster"
EXTERNAL_TOPOLOGY_MODE = "External"

CONTROL_PLANE_LABEL = "node-role.kubernetes.io/master"

RELEASE_VERSION_ANNOTATION = "release.openshift.io/version"
IP_FAMILY_MODE_ANNOTATION = "networkoperator.openshift.io/ip-family-mode"
ROLLOUT_HUNG_ANNOTATION = "networkoperator.openshift.io/rollout-hung"
CLUSTER_INITIATOR_ANNOTATION = "networkoperator.openshift.io/ovn-cluster-initiator"

# Database ports
NB_PORT = 9641
SB_PORT = 9642
NB_RAFT_PORT = 9643
SB_RAFT_PORT = 9644
