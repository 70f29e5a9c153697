# tests/unit/test_lineage.py

from datetime import datetime, timezone

from shaderland.schemas.shader import Artifact
from shaderland.services.lineage import attach_lineage
from shaderland.utils.ids import generate_id

FIXED_TIME = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def make_ids(*ids):
    it = iter(ids)
    return lambda: next(it)


class TestAttachLineage:

    def test_root_shader_is_its_own_lineage(self):
        artifact = Artifact(html="<html></html>", config={"Controls": {}})
        shader = attach_lineage(artifact, "user1", "blue waves", id_factory=make_ids("root00000000001"), clock=lambda: FIXED_TIME)
        assert shader.id == "root00000000001"
        assert shader.lineage_id == shader.id
        assert shader.parent_id is None
        assert shader.is_root
        assert shader.created_at == FIXED_TIME
        assert shader.metadata == {"prompt": "blue waves"}

    def test_remix_inherits_lineage(self):
        ids = make_ids("root00000000001", "child0000000001", "grand0000000001")
        root = attach_lineage(Artifact(html="a", config={}), "user1", "p1", id_factory=ids)
        child = attach_lineage(Artifact(html="b", config={}), "user2", "p2", parent=root, id_factory=ids)
        grandchild = attach_lineage(Artifact(html="c", config={}), "user1", "p3", parent=child, id_factory=ids)

        assert child.lineage_id == root.id
        assert child.parent_id == root.id
        assert grandchild.lineage_id == root.id
        assert grandchild.parent_id == child.id
        assert not grandchild.is_root

    def test_extra_metadata_is_kept(self):
        shader = attach_lineage(
            Artifact(html="a", config={}), "user1", "p", extra_metadata={"model": "m", "client_ip": "1.2.3.4"}
        )
        assert shader.metadata == {"model": "m", "client_ip": "1.2.3.4", "prompt": "p"}

    def test_artifact_round_trips(self):
        config = {"Controls": {"speed": {"value": 1}}}
        shader = attach_lineage(Artifact(html="<html/>", config=config), "u", "p")
        assert shader.artifact() == Artifact(html="<html/>", config=config)


class TestGenerateId:

    def test_length_and_alphabet(self):
        for _ in range(50):
            value = generate_id()
            assert len(value) == 15
            assert value.isalnum() and value.isascii()

    def test_ids_differ(self):
        assert len({generate_id() for _ in range(200)}) == 200
