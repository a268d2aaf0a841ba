from urllib.error import URLError

import pytest
from conftest import build_record, feature

from genbank_annot import AnnotationRecord, GBAccession, read_genbank
from genbank_annot.data_fetching import (
    AnnotationStorage,
    FetchConfig,
    GenBankCache,
    GenBankFetcher,
    NCBIClient,
    fetch_genbank,
)
from genbank_annot.data_fetching.client import retry_on_network_error
from genbank_annot.exceptions import GenBankFetchError, GenBankWarning


def accession_record(accession: str) -> str:
    features = feature("source", "1..120", 'organism="x"')
    features += feature("gene", "1..30", f'gene="{accession}"')
    text = build_record(features)
    return text.replace("TEST0001", accession)


class FakeClient(NCBIClient):
    """In-memory nuccore: accession -> record text, uid is the accession."""

    def __init__(self, records: dict[str, str]):
        self.records = records
        self.searches: list[str] = []
        self.fetches: list[list[str]] = []

    def search(self, term: str, retmax: int = 20) -> list[str]:
        self.searches.append(term)
        accession = term.replace("[ACCN]", "")
        return [accession] if accession in self.records else []

    def fetch_records(self, uids: list[str]) -> str:
        self.fetches.append(list(uids))
        return "".join(self.records[uid] for uid in uids)


class FailingClient(NCBIClient):
    def search(self, term: str, retmax: int = 20) -> list[str]:
        raise AssertionError("network should not be used")

    def fetch_records(self, uids: list[str]) -> str:
        raise AssertionError("network should not be used")


@pytest.fixture
def client():
    return FakeClient({name: accession_record(name) for name in ("AB000001.1", "AB000002.1")})


class TestGBAccession:
    def test_single_string(self):
        assert list(GBAccession("AB000001.1")) == ["AB000001.1"]

    def test_empty(self):
        with pytest.raises(ValueError):
            GBAccession([" "])


class TestGenBankFetcher:
    def test_single_accession_returns_text(self, client):
        text = fetch_genbank(["AB000001.1"], config=FetchConfig(), client=client)
        assert isinstance(text, str)
        assert "AB000001.1" in text
        assert client.searches == ["AB000001.1[ACCN]"]

    def test_several_accessions_return_mapping(self, client):
        texts = fetch_genbank(["AB000001.1", "AB000002.1"], config=FetchConfig(), client=client)
        assert list(texts) == ["AB000001.1", "AB000002.1"]
        assert client.fetches == [["AB000001.1", "AB000002.1"]]

    def test_unresolved_ids_warn(self, client):
        fetcher = GenBankFetcher(config=FetchConfig(), client=client)
        with pytest.warns(GenBankWarning, match="XX999999.1"):
            outcome = fetcher.fetch(["AB000001.1", "XX999999.1"])
        assert outcome.failed == ["XX999999.1"]
        assert list(outcome.records) == ["AB000001.1"]
        assert isinstance(outcome.text(), str)

    def test_nothing_resolved_is_fatal(self, client):
        fetcher = GenBankFetcher(config=FetchConfig(), client=client)
        with pytest.warns(GenBankWarning):
            with pytest.raises(GenBankFetchError):
                fetcher.fetch(["XX999999.1"])

    def test_cached_records_not_downloaded_again(self, client, tmp_path):
        config = FetchConfig(cache_dir=tmp_path)
        GenBankFetcher(config=config, client=client).fetch(["AB000001.1"])
        assert (tmp_path / "AB000001.1.gb").exists()

        outcome = GenBankFetcher(config=config, client=FailingClient()).fetch(["AB000001.1"])
        assert outcome.cached == ["AB000001.1"]
        assert outcome.records["AB000001.1"].startswith("LOCUS")


class TestGenBankCache:
    def test_store_and_stats(self, tmp_path):
        cache = GenBankCache(tmp_path)
        assert not cache.is_cached("AB000001.1")
        cache.store("AB000001.1", "LOCUS\n//\n")
        assert cache.is_cached("AB000001.1")
        assert cache.get_cache_stats()["cached_accessions"] == ["AB000001.1"]


class TestFetchConfig:
    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("NCBI_EMAIL", "someone@example.org")
        monkeypatch.setenv("NCBI_API_KEY", "key")
        monkeypatch.setenv("GENBANK_CACHE_DIR", str(tmp_path))
        config = FetchConfig.from_env()
        assert config.email == "someone@example.org"
        assert config.delay == 0.34
        assert config.cache_dir == tmp_path

    def test_unknown_override(self, monkeypatch):
        monkeypatch.setenv("NCBI_EMAIL", "someone@example.org")
        with pytest.raises(TypeError):
            FetchConfig.from_env(retries=2)


class TestReadAccessions:
    def test_single_accession(self, client):
        record = read_genbank(GBAccession("AB000002.1"), fetch_config=FetchConfig(), client=client)
        assert isinstance(record, AnnotationRecord)
        assert record.genes["gene_id"].tolist() == ["AB000002.1"]

    def test_several_accessions(self, client):
        records = read_genbank(
            GBAccession(["AB000001.1", "AB000002.1"]), fetch_config=FetchConfig(), client=client
        )
        assert sorted(records) == ["AB000001.1", "AB000002.1"]
        assert records["AB000001.1"].version.accession_version == "AB000001.1.1"

    def test_partial_resolution_names_record_by_version(self, client):
        with pytest.warns(GenBankWarning, match="XX999999.1"):
            record = read_genbank(
                GBAccession(["XX999999.1", "AB000002.1"]), fetch_config=FetchConfig(), client=client
            )
        assert isinstance(record, AnnotationRecord)
        assert record.name == "AB000002.1.1"


class TestAnnotationStorage:
    def test_tables_and_fasta(self, tmp_path, record_text):
        record = read_genbank(text=record_text)
        storage = AnnotationStorage(tmp_path)
        paths = storage.save_tables(record, "TEST0001")
        assert tmp_path / "TEST0001_genes.tsv" in paths
        cds = (tmp_path / "TEST0001_cds.tsv").read_text().splitlines()
        assert "GI:1,UniProt:Q1" in cds[1]

        fasta = storage.save_sequences(record, "TEST0001")
        assert fasta.read_text().startswith(">Testus organismus")

        summary = storage.save_summary({"TEST0001": record})
        assert summary.read_text().splitlines()[0].startswith("name\taccession")


class TestRetry:
    def test_retries_then_succeeds(self):
        calls = []

        @retry_on_network_error(max_retries=3, backoff=0)
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise URLError("temporary")
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 3

    def test_gives_up(self):
        @retry_on_network_error(max_retries=2, backoff=0)
        def broken():
            raise RuntimeError("Search Backend failed")

        with pytest.raises(GenBankFetchError, match="after 2 attempts"):
            broken()
