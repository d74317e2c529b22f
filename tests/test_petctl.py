"""Unit tests for the petctl CLI."""

import json
from unittest.mock import AsyncMock, patch

import pytest
import yaml
from click.testing import CliRunner

from clients.pet import Pet, PetStatus
from errors import ErrorKind, PetstoreError
from external import (
    EXTERNAL_NAME_ANNOTATION,
    ExternalObservation,
    ExternalPet,
    ObservationState,
)
from models import PetObservation
from petctl import cli, load_manifest


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def external():
    return AsyncMock(spec=ExternalPet)


@pytest.fixture
def manifest(tmp_path, sample_resource):
    path = tmp_path / "rex.yaml"
    path.write_text(yaml.safe_dump(sample_resource))
    return path


@pytest.fixture
def unbound_manifest(tmp_path, sample_resource):
    sample_resource["metadata"] = {}
    path = tmp_path / "rex.json"
    path.write_text(json.dumps(sample_resource))
    return path


class TestManifests:
    """Tests for reading manifests."""

    def test_load_yaml(self, manifest):
        resource = load_manifest(str(manifest))
        assert resource["name"] == "rex"

    def test_load_json(self, unbound_manifest):
        resource = load_manifest(str(unbound_manifest))
        assert resource["metadata"] == {}


class TestObserve:
    """Tests for 'petctl observe'."""

    def test_observe_up_to_date(self, runner, external, manifest):
        external.observe.return_value = ExternalObservation(
            state=ObservationState.EXISTS_UP_TO_DATE,
            observation=PetObservation(id=565656, status=PetStatus.AVAILABLE),
        )
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["observe", str(manifest)])

        assert result.exit_code == 0
        assert "565656" in result.output
        assert "AVAILABLE" in result.output
        assert "✓" in result.output
        external.observe.assert_called_once()
        assert external.observe.call_args[0][1] == "565656"

    def test_observe_unbound(self, runner, external, unbound_manifest):
        external.observe.return_value = ExternalObservation(
            state=ObservationState.NO_IDENTITY
        )
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["observe", str(unbound_manifest)])

        assert result.exit_code == 0
        assert "✗" in result.output

    def test_observe_error_exits_nonzero(self, runner, external, manifest):
        external.observe.side_effect = PetstoreError(ErrorKind.TRANSPORT, "Boom")
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["observe", str(manifest)])

        assert result.exit_code == 1
        assert "Error: Boom" in result.output

    def test_server_option_overrides(self, runner, external, manifest):
        external.observe.return_value = ExternalObservation(
            state=ObservationState.ABSENT
        )
        with patch("petctl.connect", return_value=external) as mock_connect:
            runner.invoke(cli, ["-s", "http://other/api", "observe", str(manifest)])

        resource = mock_connect.call_args[0][0]
        assert resource["plugin_config"] == {"server_url": "http://other/api"}


class TestApply:
    """Tests for 'petctl apply'."""

    def test_apply_creates_and_binds(self, runner, external, unbound_manifest):
        external.observe.return_value = ExternalObservation(
            state=ObservationState.NO_IDENTITY
        )
        external.create.return_value = "424242"
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["apply", str(unbound_manifest)])

        assert result.exit_code == 0
        assert "Pet 424242 created" in result.output
        saved = json.loads(unbound_manifest.read_text())
        assert saved["metadata"]["annotations"][EXTERNAL_NAME_ANNOTATION] == "424242"

    def test_apply_updates_stale(self, runner, external, manifest):
        external.observe.return_value = ExternalObservation(
            state=ObservationState.EXISTS_STALE,
            observation=PetObservation(id=565656),
        )
        before = manifest.read_text()
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["apply", str(manifest)])

        assert result.exit_code == 0
        assert "Pet 565656 updated" in result.output
        external.update.assert_called_once()
        external.create.assert_not_called()
        assert manifest.read_text() == before

    def test_apply_unchanged(self, runner, external, manifest):
        external.observe.return_value = ExternalObservation(
            state=ObservationState.EXISTS_UP_TO_DATE,
            observation=PetObservation(id=565656),
        )
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["apply", str(manifest)])

        assert result.exit_code == 0
        assert "Pet 565656 unchanged" in result.output
        external.update.assert_not_called()

    def test_apply_wrong_type(self, runner, tmp_path, sample_resource):
        sample_resource["resource_type_name"] = "Dog"
        path = tmp_path / "dog.yaml"
        path.write_text(yaml.safe_dump(sample_resource))

        result = runner.invoke(cli, ["apply", str(path)])

        assert result.exit_code == 1
        assert "not a Pet" in result.output


class TestDelete:
    """Tests for 'petctl delete'."""

    def test_delete(self, runner, external, manifest):
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["delete", str(manifest)])

        assert result.exit_code == 0
        assert "Pet 565656 deleted" in result.output
        external.delete.assert_called_once_with("565656")

    def test_delete_unbound(self, runner, external, unbound_manifest):
        with patch("petctl.connect", return_value=external):
            result = runner.invoke(cli, ["delete", str(unbound_manifest)])

        assert result.exit_code == 0
        assert "No pet bound" in result.output
        external.delete.assert_not_called()


class TestDescribe:
    """Tests for 'petctl describe'."""

    @pytest.fixture
    def mock_client(self):
        with patch("petctl.PetClient") as mock_client_cls:
            client = mock_client_cls.return_value
            client.get_pet_by_id = AsyncMock(
                return_value=Pet(id=7, name="rex", status=PetStatus.PENDING)
            )
            yield mock_client_cls

    def test_describe_json(self, runner, mock_client):
        result = runner.invoke(cli, ["-s", "http://store", "describe", "7"])

        assert result.exit_code == 0
        mock_client.assert_called_once_with("http://store")
        body = json.loads(result.output)
        assert body == {"id": 7, "name": "rex", "photoUrls": [], "status": "PENDING"}

    def test_describe_yaml(self, runner, mock_client):
        result = runner.invoke(cli, ["describe", "7", "-o", "yaml"])

        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["name"] == "rex"

    def test_describe_not_found(self, runner, mock_client):
        mock_client.return_value.get_pet_by_id.side_effect = PetstoreError(
            ErrorKind.NOT_FOUND, "Pet not found"
        )
        result = runner.invoke(cli, ["describe", "7"])

        assert result.exit_code == 1
        assert "Pet not found" in result.output
