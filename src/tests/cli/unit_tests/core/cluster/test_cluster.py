"""Unit tests for the assembled cluster handle."""

from unittest.mock import MagicMock, Mock

import pytest

from lncluster.core.cluster.cluster import Cluster, assemble
from lncluster.core.errors import TeardownFailure


def make_node(node_id, kill=None):
    node = Mock()
    node.id = node_id
    node.kill = kill or Mock()
    node.to_dict.return_value = {"id": node_id}
    return node


class TestCluster:
    """Test suite for Cluster."""

    def test_assemble_keeps_order(self):
        """Test nodes keep their provisioning order."""
        nodes = [make_node("a"), make_node("b"), make_node("c")]

        cluster = assemble(nodes)

        assert len(cluster) == 3
        assert [n.id for n in cluster] == ["a", "b", "c"]

    def test_kill_tears_down_every_node(self):
        """Test kill() reaches every node."""
        nodes = [make_node(str(i)) for i in range(4)]
        logger = MagicMock()

        Cluster(nodes, logger).kill()

        for node in nodes:
            node.kill.assert_called_once()
        logger.info.assert_called_once_with("Tore down 4 of 4 nodes.")

    def test_kill_reports_failures_after_trying_all(self):
        """Test one failing teardown does not skip the rest."""
        cause = RuntimeError("stuck")
        nodes = [make_node("a"), make_node("b", kill=Mock(side_effect=cause))]
        nodes.append(make_node("c"))

        with pytest.raises(TeardownFailure) as exc_info:
            Cluster(nodes).kill()

        for node in nodes:
            node.kill.assert_called_once()
        assert exc_info.value.__cause__ is cause
        assert "1 node(s) failed" in str(exc_info.value)

    def test_kill_empty_cluster(self):
        """Test an empty cluster has nothing to tear down."""
        Cluster([]).kill()

    def test_to_dict(self):
        """Test the cluster serializes its nodes."""
        cluster = Cluster([make_node("a"), make_node("b")])

        assert cluster.to_dict() == {"nodes": [{"id": "a"}, {"id": "b"}]}
