import unittest

from driveplayer.models import DriveNode, FileInfo, NodeKind
from driveplayer.util.mime import FOLDER_MIME


def _tree() -> DriveNode:
    video = DriveNode(id="V1", name="1 intro.mp4", mime_type="video/mp4", size=1000)
    pdf = DriveNode(id="P1", name="notes.pdf", mime_type="application/pdf")
    inner = DriveNode(id="F2", name="Week 2", mime_type=FOLDER_MIME, children=(video,))
    empty = DriveNode(id="F1", name="Week 1", mime_type=FOLDER_MIME, children=())
    return DriveNode(id="R", name="Course", mime_type=FOLDER_MIME, children=(empty, inner, pdf))


class TestDriveNode(unittest.TestCase):
    def test_from_file_info_folder_gets_children_tuple(self) -> None:
        info = FileInfo(file_id="F", name="Folder", mime_type=FOLDER_MIME)
        node = DriveNode.from_file_info(info)
        self.assertEqual(node.children, ())
        self.assertIs(node.kind, NodeKind.FOLDER)

    def test_from_file_info_leaf_has_no_children(self) -> None:
        info = FileInfo(file_id="V", name="clip.mov", mime_type="application/octet-stream", size=5)
        node = DriveNode.from_file_info(info, [DriveNode(id="x", name="x", mime_type="x")])
        self.assertIsNone(node.children)
        self.assertTrue(node.is_video)
        self.assertEqual(node.size, 5)

    def test_iter_nodes_is_preorder(self) -> None:
        ids = [node.id for node in _tree().iter_nodes()]
        self.assertEqual(ids, ["R", "F1", "F2", "V1", "P1"])

    def test_find(self) -> None:
        tree = _tree()
        self.assertEqual(tree.find("V1").name, "1 intro.mp4")
        self.assertIsNone(tree.find("missing"))

    def test_nodes_are_immutable(self) -> None:
        node = _tree()
        with self.assertRaises(AttributeError):
            node.name = "changed"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
