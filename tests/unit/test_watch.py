"""Unit tests for the kubectl resource watch provider."""

import json
import subprocess
from unittest.mock import Mock, patch

import pytest

from lightspeed.context import ResourceDescriptor
from lightspeed.watch import KubectlResourceProvider, kubectl_resource_name


@pytest.fixture
def provider(config):
    return KubectlResourceProvider(config)


def completed(stdout):
    return Mock(returncode=0, stdout=stdout, stderr="")


class TestKubectlResourceName:
    def test_core_kind(self):
        assert kubectl_resource_name("Pod") == "Pod"

    def test_group_version_kind(self):
        assert kubectl_resource_name("kubevirt.io~v1~VirtualMachine") == "VirtualMachine.v1.kubevirt.io"


class TestKubectlResourceProvider:
    @patch("lightspeed.watch.run_command")
    def test_get_namespaced(self, mock_run, provider, pod):
        mock_run.return_value = completed(json.dumps(pod))

        assert provider.get(ResourceDescriptor("Pod", "nginx", "default")) == pod

        cmd = mock_run.call_args.args[0]
        assert cmd == ["kubectl", "get", "Pod", "nginx", "-o", "json", "--namespace", "default"]
        assert mock_run.call_args.kwargs["timeout"] == 30

    @patch("lightspeed.watch.run_command")
    def test_get_with_context(self, mock_run, config):
        config.kubectl_context = "prod"
        mock_run.return_value = completed("{}")

        KubectlResourceProvider(config).get(ResourceDescriptor("Node", "worker-0"))

        assert mock_run.call_args.args[0] == ["kubectl", "--context", "prod", "get", "Node", "worker-0", "-o", "json"]

    @patch("lightspeed.watch.run_command")
    def test_alert_not_fetched(self, mock_run, provider):
        assert provider.get(ResourceDescriptor("Alert", "Watchdog", None)) is None
        assert provider.get(None) is None
        mock_run.assert_not_called()

    @patch("lightspeed.watch.run_command")
    def test_not_found(self, mock_run, provider):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["kubectl"], output="", stderr='Error from server (NotFound): pods "nginx" not found'
        )

        assert provider.get(ResourceDescriptor("Pod", "nginx", "default")) is None

    @patch("lightspeed.watch.run_command")
    def test_timeout(self, mock_run, provider):
        mock_run.side_effect = subprocess.TimeoutExpired(["kubectl"], 30)

        assert provider.get(ResourceDescriptor("Pod", "nginx", "default")) is None

    @patch("lightspeed.watch.run_command")
    def test_kubectl_missing(self, mock_run, provider):
        mock_run.side_effect = FileNotFoundError("kubectl")

        assert provider.get(ResourceDescriptor("Pod", "nginx", "default")) is None

    @pytest.mark.parametrize("stdout", ["not json", "[1, 2]"])
    @patch("lightspeed.watch.run_command")
    def test_unusable_output(self, mock_run, stdout, provider):
        mock_run.return_value = completed(stdout)

        assert provider.get(ResourceDescriptor("Pod", "nginx", "default")) is None
