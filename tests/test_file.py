"""Unit tests for files, versions, comments and discussions."""

import gc
from unittest.mock import Mock

import pytest

from pybox.comment import Comment
from pybox.discussion import Discussion
from pybox.exceptions import BoxNotFoundError
from pybox.file import File
from pybox.folder import Folder
from pybox.version import Version


class TestFileContent:
    """Tests for downloads and uploads."""

    def test_download_returns_bytes(self):
        """Test download delegates to the client."""
        mock_client = Mock()
        mock_client.download_content.return_value = b"hello"
        file = File(mock_client, {"id": "1"})

        assert file.download() == b"hello"
        mock_client.download_content.assert_called_once_with("1")

    def test_download_to_path(self, tmp_path):
        """Test download also writes to a local path."""
        mock_client = Mock()
        mock_client.download_content.return_value = b"hello"
        target = tmp_path / "out.txt"

        File(mock_client, {"id": "1"}).download(target)

        assert target.read_bytes() == b"hello"

    def test_upload_overwrite_returns_new_file(self):
        """Test overwrite returns a new File and keeps the original."""
        mock_client = Mock()
        mock_client.upload_content.return_value = {
            "type": "file",
            "id": "1",
            "name": "a.txt",
            "etag": "2",
        }
        file = File(mock_client, {"id": "1", "name": "a.txt", "etag": "1"})

        new_file = file.upload_overwrite(b"data")

        mock_client.upload_content.assert_called_once_with(
            "1", b"data", mode="overwrite"
        )
        assert new_file is not file
        assert new_file.etag == "2"
        assert file.etag == "1"

    def test_upload_copy_defaults_to_parent(self):
        """Test a copy goes to the file's parent folder by default."""
        mock_client = Mock()
        mock_client.upload_content.return_value = {"type": "file", "id": "2"}
        file = File(mock_client, {"id": "1", "parent": {"type": "folder", "id": "7"}})

        copy = file.upload_copy(b"data")

        mock_client.upload_content.assert_called_once_with(
            "1", b"data", mode="copy", destination_id="7"
        )
        assert copy.id == "2"

    def test_upload_copy_explicit_destination(self):
        """Test a copy into an explicit folder makes no parent lookup."""
        mock_client = Mock()
        mock_client.upload_content.return_value = {"type": "file", "id": "2"}
        file = File(mock_client, {"id": "1"})

        file.upload_copy(b"data", destination_id="9")

        mock_client.fetch_attributes.assert_not_called()
        mock_client.upload_content.assert_called_once_with(
            "1", b"data", mode="copy", destination_id="9"
        )

    def test_file_in_folder_listing_has_parent(self):
        """Test a listed file resolves its parent without a request."""
        mock_client = Mock()
        folder = Folder(
            mock_client, {"id": "7", "items": [{"type": "file", "id": "1"}]}
        )
        file = folder.files()[0]

        assert file.parent is folder
        mock_client.fetch_attributes.assert_not_called()


class TestVersions:
    """Tests for file versions."""

    def test_versions_in_server_order(self):
        """Test versions keep the server order and know their file."""
        mock_client = Mock()
        mock_client.list_versions.return_value = [
            {"type": "file_version", "id": "v2"},
            {"type": "file_version", "id": "v1"},
        ]
        file = File(mock_client, {"id": "1"})

        versions = file.versions()

        assert [v.id for v in versions] == ["v2", "v1"]
        assert all(v.file_id == "1" for v in versions)

    def test_version_info(self):
        """Test fetching one version."""
        mock_client = Mock()
        mock_client.fetch_version.return_value = {"id": "v1", "size": 4}
        file = File(mock_client, {"id": "1"})

        version = file.version("v1")

        mock_client.fetch_version.assert_called_once_with("1", "v1")
        assert version.size == 4

    def test_version_lazy_fetch_uses_file(self):
        """Test a version fetches its info through its file."""
        mock_client = Mock()
        mock_client.fetch_version.return_value = {"id": "v1", "name": "a.txt"}
        version = Version(mock_client, {"id": "v1"}, file_id="1")

        assert version.name == "a.txt"
        mock_client.fetch_version.assert_called_once_with("1", "v1")
        mock_client.fetch_attributes.assert_not_called()

    def test_version_listed_in_file_attributes(self):
        """Test versions merged into a file's attributes know their file."""
        file = File(
            Mock(), {"id": "1", "versions": [{"type": "file_version", "id": "v1"}]}
        )

        assert file.attributes["versions"][0].file_id == "1"

    def test_delete_version(self):
        """Test deleting a version returns its post-delete state."""
        mock_client = Mock()
        mock_client.delete_version.return_value = {}
        file = File(mock_client, {"id": "1"})

        deleted = file.delete_version("v1")

        mock_client.delete_version.assert_called_once_with("1", "v1")
        assert isinstance(deleted, Version)
        assert deleted.id == "v1"
        assert deleted.file_id == "1"
        assert deleted.trashed is True

    def test_download_version(self):
        """Test downloading one version."""
        mock_client = Mock()
        mock_client.download_content.return_value = b"old"
        file = File(mock_client, {"id": "1"})

        assert file.download_version("v1") == b"old"
        mock_client.download_content.assert_called_once_with("1", version_id="v1")

    def test_version_without_file_cannot_fetch(self):
        """Test a version that does not know its file."""
        version = Version(Mock(), {"id": "v1"})

        with pytest.raises(BoxNotFoundError):
            version.download()

    def test_version_update(self):
        """Test a version update goes through its file and returns a new Version."""
        mock_client = Mock()
        mock_client.update_version.return_value = {
            "type": "file_version",
            "id": "v1",
            "name": "renamed.txt",
        }
        version = Version(mock_client, {"id": "v1", "name": "a.txt"}, file_id="1")

        updated = version.update(name="renamed.txt")

        mock_client.update_version.assert_called_once_with(
            "1", "v1", {"name": "renamed.txt"}
        )
        assert isinstance(updated, Version)
        assert updated is not version
        assert updated.file_id == "1"
        assert updated.name == "renamed.txt"
        assert version.name == "a.txt"

    def test_listed_version_outlives_its_file(self):
        """Test a listed version keeps its file id after the File is gone."""
        mock_client = Mock()
        mock_client.download_content.return_value = b"old"
        versions = File(
            mock_client,
            {"type": "file", "id": "5", "versions": [{"type": "version", "id": "v1"}]},
        ).get("versions")
        gc.collect()

        assert versions[0].file_id == "5"
        assert versions[0].download() == b"old"
        mock_client.download_content.assert_called_once_with("5", version_id="v1")


class TestComments:
    """Tests for comments on files and discussions."""

    def test_file_comments(self):
        """Test listing and adding comments on a file."""
        mock_client = Mock()
        mock_client.list_comments.return_value = [
            {"type": "comment", "id": "c1", "message": "first"},
            {"type": "comment", "id": "c2", "message": "second"},
        ]
        mock_client.add_comment.return_value = {
            "type": "comment",
            "id": "c3",
            "message": "third",
        }
        file = File(mock_client, {"id": "1"})

        comments = file.comments()
        added = file.add_comment("third")

        mock_client.list_comments.assert_called_once_with("file", "1")
        mock_client.add_comment.assert_called_once_with("file", "1", "third")
        assert [c.message for c in comments] == ["first", "second"]
        assert isinstance(added, Comment)
        assert added.message == "third"

    def test_discussion_comments(self):
        """Test each discussion comment is built from its own fragment."""
        mock_client = Mock()
        mock_client.list_comments.return_value = [
            {"type": "comment", "id": "c1", "message": "a"},
            {"type": "comment", "id": "c2", "message": "b"},
        ]
        discussion = Discussion(mock_client, {"id": "d1"})

        comments = discussion.comments()

        mock_client.list_comments.assert_called_once_with("discussion", "d1")
        assert [c.id for c in comments] == ["c1", "c2"]

    def test_discussion_add_comment(self):
        """Test adding a comment to a discussion."""
        mock_client = Mock()
        mock_client.add_comment.return_value = {"type": "comment", "id": "c1"}

        comment = Discussion(mock_client, {"id": "d1"}).add_comment("hi")

        mock_client.add_comment.assert_called_once_with("discussion", "d1", "hi")
        assert comment.id == "c1"

    def test_comment_update_and_delete(self):
        """Test comment update and delete return new comments."""
        mock_client = Mock()
        mock_client.update_attributes.return_value = {
            "type": "comment",
            "id": "c1",
            "message": "edited",
        }
        mock_client.delete_item.return_value = {"type": "comment", "id": "c1"}
        comment = Comment(mock_client, {"id": "c1", "message": "orig"})

        updated = comment.update(message="edited")
        deleted = comment.delete()

        mock_client.update_attributes.assert_called_once_with(
            "comment", "c1", {"message": "edited"}
        )
        mock_client.delete_item.assert_called_once_with("comment", "c1")
        assert updated.message == "edited"
        assert deleted.trashed is True
        assert comment.message == "orig"

    def test_comment_info_uses_comment_endpoint(self):
        """Test a comment fetches its info by its own id."""
        mock_client = Mock()
        mock_client.fetch_attributes.return_value = {"id": "c1", "message": "m"}

        assert Comment(mock_client, {"id": "c1"}).message == "m"
        mock_client.fetch_attributes.assert_called_once_with("comment", "c1")

    def test_discussion_info_uses_discussion_endpoint(self):
        """Test a discussion fetches its info by its own id."""
        mock_client = Mock()
        mock_client.fetch_attributes.return_value = {"id": "d1", "name": "plans"}

        assert Discussion(mock_client, {"id": "d1"}).name == "plans"
        mock_client.fetch_attributes.assert_called_once_with("discussion", "d1")
