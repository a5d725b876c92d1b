"""Tests for the UniProt client: entry parsing, retry policy and pagination."""

from unittest.mock import MagicMock, Mock, patch

import httpx
import pytest

from ptm_coloc.analysis import CalibrationParameters
from ptm_coloc.api_clients.uniprot import (
    UniProtClient,
    parse_next_cursor,
    parse_uniprot_entry,
)
from ptm_coloc.batch import BatchPipeline, BatchState
from ptm_coloc.config import load_config
from ptm_coloc.exceptions import (
    BatchAborted,
    MalformedPage,
    NotFound,
    TransientSourceError,
)


def feature(feature_type, start, end=None, description=""):
    return {
        "type": feature_type,
        "description": description,
        "location": {
            "start": {"value": start},
            "end": {"value": end if end is not None else start},
        },
    }


@pytest.fixture
def uniprot_entry():
    """Realistic search result entry with all feature kinds."""
    return {
        "primaryAccession": "P01308",
        "organism": {"scientificName": "Homo sapiens"},
        "genes": [{"geneName": {"value": "INS"}}],
        "sequence": {"value": "MALWMRLLPLLALLALWGPDPAAA", "length": 24},
        "features": [
            feature("Disulfide bond", 7, 19),
            feature("Disulfide bond", 20, 20, "Interchain"),
            feature("Glycosylation", 3, description="N-linked (GlcNAc...) asparagine"),
            feature("Glycosylation", 11, description="O-linked (GalNAc...) threonine"),
            feature("Modified residue", 14, description="Phosphoserine"),
            feature("Modified residue", 16, description="Methionine sulfoxide"),
            {
                "type": "Glycosylation",
                "description": "N-linked (GlcNAc...) asparagine",
                "location": {"start": {"value": None}, "end": {"value": None}},
            },
        ],
    }


def make_response(json_data, headers=None):
    response = Mock()
    response.json.return_value = json_data
    response.headers = headers or {}
    response.raise_for_status = Mock()
    return response


def make_error_response(status_code=503):
    error_response = Mock()
    error_response.status_code = status_code
    error_response.reason_phrase = "Service Unavailable"
    error_response.json.side_effect = ValueError("no body")

    response = Mock()
    response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "Server error",
        request=Mock(),
        response=error_response,
    )
    return response


@pytest.fixture
def mock_client():
    """Patch httpx.Client so every `with httpx.Client()` yields the same mock."""
    with patch("ptm_coloc.api_clients.uniprot.httpx.Client") as mock_client_class:
        client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = client
        mock_client_class.return_value.__exit__.return_value = False
        yield client


def test_parse_uniprot_entry(uniprot_entry):
    protein = parse_uniprot_entry(uniprot_entry)

    assert protein.accession == "P01308"
    assert protein.gene == "INS"
    assert protein.scientific_name == "Homo sapiens"
    assert protein.length == 24
    assert protein.ss_bonds == (7, 20)
    assert [(r.start, r.end) for r in protein.ss_bond_ranges] == [(7, 19), (20, 20)]
    assert protein.n_linked == (3,)
    assert protein.o_linked == (11,)
    assert protein.phosphorylation == (14,)


def test_parse_entry_fallbacks():
    protein = parse_uniprot_entry({
        "primaryAccession": "Q99999",
        "sequence": {"value": "MKV", "length": 3},
    })

    assert protein.gene == "Q99999"
    assert protein.scientific_name == "Unknown Species"
    assert protein.n_linked == ()


def test_parse_entry_without_accession():
    with pytest.raises(MalformedPage):
        parse_uniprot_entry({"sequence": {"value": "MKV", "length": 3}})


@pytest.mark.parametrize("entry", [
    "not-an-object",
    {"primaryAccession": "X1", "sequence": {"value": "MKV", "length": "abc"}},
    {"primaryAccession": "X2", "sequence": "MKV"},
    {"primaryAccession": "X3", "features": [{"type": "Glycosylation", "location": 7}]},
])
def test_parse_undecodable_entry(entry):
    with pytest.raises(MalformedPage):
        parse_uniprot_entry(entry)


def test_parse_entry_null_features():
    protein = parse_uniprot_entry({
        "primaryAccession": "Q88888",
        "sequence": {"value": "MKV", "length": 3},
        "features": None,
    })

    assert protein.ss_bonds == ()
    assert protein.n_linked == ()


def test_parse_next_cursor():
    link = (
        '<https://rest.uniprot.org/uniprotkb/search?query=x&cursor=1mkycb2xwxbouw&size=250>; '
        'rel="next"'
    )

    assert parse_next_cursor(link) == "1mkycb2xwxbouw"
    assert parse_next_cursor(None) is None
    assert parse_next_cursor('<https://example.org/?cursor=abc>; rel="prev"') is None


@patch("time.sleep")
def test_fetch_one_success(mock_sleep, mock_client, uniprot_entry):
    mock_client.get.return_value = make_response({"results": [uniprot_entry]})
    client = UniProtClient()

    protein = client.fetch_one("  INS ")

    assert protein.accession == "P01308"
    params = mock_client.get.call_args.kwargs["params"]
    assert '(gene_exact:"INS")' in params["query"]
    assert "(organism_id:9606)" in params["query"]
    assert "(reviewed:true)" in params["query"]
    assert params["size"] == 1
    mock_sleep.assert_not_called()


@patch("time.sleep")
def test_fetch_one_not_found_is_terminal(mock_sleep, mock_client):
    """No match returns immediately: one request, no retry delay."""
    mock_client.get.return_value = make_response({"results": []})
    client = UniProtClient(max_retries=2, retry_delay=1.0)

    with pytest.raises(NotFound) as exc_info:
        client.fetch_one("NOTAGENE")

    assert exc_info.value.query == "NOTAGENE"
    assert mock_client.get.call_count == 1
    mock_sleep.assert_not_called()


@patch("time.sleep")
def test_fetch_one_transient_error_retries_then_raises(mock_sleep, mock_client):
    """A persistent failure is retried exactly max_retries more times."""
    mock_client.get.return_value = make_error_response(503)
    client = UniProtClient(max_retries=2, retry_delay=1.0)

    with pytest.raises(TransientSourceError) as exc_info:
        client.fetch_one("FN1")

    assert exc_info.value.status_code == 503
    assert mock_client.get.call_count == 3
    assert mock_sleep.call_count == 2
    assert all(call.args[0] == pytest.approx(1.0) for call in mock_sleep.call_args_list)


@patch("time.sleep")
def test_fetch_one_recovers_after_transient_error(mock_sleep, mock_client, uniprot_entry):
    mock_client.get.side_effect = [
        make_error_response(502),
        make_response({"results": [uniprot_entry]}),
    ]
    client = UniProtClient()

    protein = client.fetch_one("INS")

    assert protein.gene == "INS"
    assert mock_client.get.call_count == 2
    assert mock_sleep.call_count == 1


@patch("time.sleep")
def test_fetch_one_connection_error_is_transient(mock_sleep, mock_client):
    mock_client.get.side_effect = httpx.ConnectError("connection refused")
    client = UniProtClient(max_retries=1, retry_delay=0.5)

    with pytest.raises(TransientSourceError):
        client.fetch_one("FN1")

    assert mock_client.get.call_count == 2


def test_fetch_one_empty_gene():
    with pytest.raises(ValueError):
        UniProtClient().fetch_one("   ")


@patch("time.sleep")
def test_fetch_page_total_and_cursor(mock_sleep, mock_client, uniprot_entry):
    headers = {
        "x-total-results": "20417",
        "link": '<https://rest.uniprot.org/uniprotkb/search?cursor=next123&size=2>; rel="next"',
    }
    mock_client.get.return_value = make_response(
        {"results": [uniprot_entry, uniprot_entry]},
        headers=headers,
    )
    client = UniProtClient()

    page = client.fetch_page("9606", page_size=2, cursor="prev999")

    assert len(page.proteins) == 2
    assert page.total == 20417
    assert page.next_cursor == "next123"
    params = mock_client.get.call_args.kwargs["params"]
    assert params["cursor"] == "prev999"
    assert params["size"] == 2
    assert params["query"] == "(organism_id:9606) AND (reviewed:true)"


@patch("time.sleep")
def test_fetch_page_last_page(mock_sleep, mock_client, uniprot_entry):
    mock_client.get.return_value = make_response({"results": [uniprot_entry]})
    client = UniProtClient()

    page = client.fetch_page("9606", page_size=250)

    assert page.total is None
    assert page.next_cursor is None
    assert "cursor" not in mock_client.get.call_args.kwargs["params"]


@patch("time.sleep")
def test_fetch_page_malformed_body_not_retried(mock_sleep, mock_client):
    mock_client.get.return_value = make_response({"messages": ["oops"]})
    client = UniProtClient()

    with pytest.raises(MalformedPage):
        client.fetch_page("9606", page_size=250)

    assert mock_client.get.call_count == 1
    mock_sleep.assert_not_called()


def test_client_from_config(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"""
data_dir: {tmp_path / "data"}
reference_organism_id: "10090"
api:
  base_url: https://uniprot.example.org/
  max_retries: 4
  retry_delay_seconds: 0.25
  timeout_seconds: 10
""")

    client = UniProtClient.from_config(load_config(config_path))

    assert client.base_url == "https://uniprot.example.org"
    assert client.search_url == "https://uniprot.example.org/uniprotkb/search"
    assert client.reference_organism_id == "10090"
    assert client.max_retries == 4
    assert client.retry_delay == 0.25
    assert client.timeout == 10


@patch("time.sleep")
@pytest.mark.parametrize("bad_entry", [
    "not-an-object",
    {"primaryAccession": "X1", "sequence": {"length": "abc"}},
])
def test_undecodable_entry_aborts_batch(mock_sleep, bad_entry, mock_client, uniprot_entry):
    """A page with an undecodable entry fails the whole run, rows discarded."""
    mock_client.get.return_value = make_response({"results": [uniprot_entry, bad_entry]})
    pipeline = BatchPipeline(UniProtClient(), CalibrationParameters(), page_size=2)

    with pytest.raises(BatchAborted) as exc_info:
        pipeline.run("9606")

    assert isinstance(exc_info.value.__cause__, MalformedPage)
    assert pipeline.state is BatchState.IDLE
    assert mock_client.get.call_count == 1
    mock_sleep.assert_not_called()
