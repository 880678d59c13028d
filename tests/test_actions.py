"""Tests for the action catalog."""

from ec2_provider.extension.actions import ACTIONS, ParamType


def _param(action: str, name: str):
    return next(p for p in ACTIONS[action].parameters if p.name == name)


class TestCatalog:
    def test_every_action_accepts_optional_region(self):
        for definition in ACTIONS.values():
            region = definition.parameters[-1]
            assert region.name == "region"
            assert region.required is False
            assert region.default == "us-east-1"

    def test_create_worker_defaults(self):
        assert _param("create_worker", "worker_name").required is True
        assert _param("create_worker", "instance_type").default == "t2.micro"
        assert _param("create_worker", "ami").default == "ami-0c55b159cbfafe1f0"

    def test_create_volume_size_is_integer(self):
        size = _param("create_volume", "size_gb")
        assert size.param_type is ParamType.INTEGER
        assert size.required is True
        assert _param("create_volume", "volume_type").default == "gp2"

    def test_attach_volume_parameters_in_order(self):
        names = [p.name for p in ACTIONS["attach_volume"].parameters]
        assert names == ["worker_id", "volume_id", "device_name", "region"]

    def test_to_dict(self):
        data = ACTIONS["delete_snapshot"].to_dict()
        assert data["name"] == "delete_snapshot"
        assert data["description"] == "Delete a snapshot"
        assert data["parameters"][0] == {
            "name": "snapshot_id",
            "description": "ID of the snapshot",
            "type": "string",
            "required": True,
            "default": None,
        }
