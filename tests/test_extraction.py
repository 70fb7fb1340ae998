"""Tests for Stage 1: entity extraction and name helpers."""

from intent_engine.models.schemas import RawMention, SourceType
from intent_engine.stages.stage1_extraction import (
    EntityExtractionStage,
    domain_stem,
    infer_domain,
    mentions_company,
    normalize_name,
)


class TestNameHelpers:
    def test_normalize_name_keeps_alphanumerics(self) -> None:
        assert normalize_name("Acme Corp.") == "acmecorp"
        assert normalize_name("DATAFLOW systems") == normalize_name("DataFlow Systems")
        assert normalize_name("") == ""

    def test_infer_domain_from_plain_name(self) -> None:
        assert infer_domain("TechFlow Solutions Inc") == "https://www.techflowsolutionsinc.com"

    def test_infer_domain_keeps_literal_domain(self) -> None:
        assert infer_domain("Shopify.com") == "https://shopify.com"

    def test_domain_stem(self) -> None:
        assert domain_stem("https://www.acme.com") == "acme"
        assert domain_stem("http://acme.io/about") == "acme"
        assert domain_stem(None) == ""


class TestMentionsCompany:
    def test_full_name_substring(self) -> None:
        assert mentions_company("DataFlow Systems", None, "I love dataflow systems a lot")

    def test_half_of_long_words(self) -> None:
        name = "Northwind Blue Analytics"
        assert mentions_company(name, None, "northwind shipped new analytics")
        assert not mentions_company(name, None, "northwind only")

    def test_generic_suffix_words_do_not_count(self) -> None:
        assert not mentions_company("DataFlow Systems", None, "Acme Systems raises Series B funding")
        assert not mentions_company("Maple Group Inc.", None, "the group met at inc. headquarters")
        assert mentions_company("Maple Group Inc.", None, "maple expands again")

    def test_domain_stem_match(self) -> None:
        assert mentions_company("Blue Ox", "https://www.blueoxhq.com", "visit blueoxhq for details")

    def test_short_stem_ignored(self) -> None:
        assert not mentions_company("Zy Co", "https://www.zy.com", "zy is everywhere")

    def test_missing_text(self) -> None:
        assert not mentions_company("Acme Corp", None, None)
        assert not mentions_company("", None, "Acme Corp")


class TestEntityExtractionStage:
    """Tests for the ordered surface-pattern rules."""

    def setup_method(self) -> None:
        self.stage = EntityExtractionStage()

    def test_legal_suffix_wins_over_camel_case(self) -> None:
        candidates = self.stage.extract("TechFlow Solutions Inc. raised funding")

        assert len(candidates) == 1
        assert candidates[0].name == "TechFlow Solutions Inc"
        assert candidates[0].rule == "legal_suffix"
        assert candidates[0].inferred_domain == "https://www.techflowsolutionsinc.com"
        assert candidates[0].extraction_confidence == 0.7

    def test_extraction_is_deterministic(self) -> None:
        text = "TechFlow Solutions Inc. raised funding"
        assert self.stage.extract(text) == self.stage.extract(text)

    def test_camel_case(self) -> None:
        candidates = self.stage.extract("We switched to DataFlow last year")

        assert [c.name for c in candidates] == ["DataFlow"]
        assert candidates[0].rule == "camel_case"

    def test_web_domain(self) -> None:
        candidates = self.stage.extract("I bought it from Shopify.com yesterday")

        assert [c.name for c in candidates] == ["Shopify.com"]
        assert candidates[0].inferred_domain == "https://shopify.com"

    def test_camel_case_domain_keeps_literal_url(self) -> None:
        candidates = self.stage.extract("Check out DataFlow.io for pipelines")

        assert [c.name for c in candidates] == ["DataFlow.io"]
        assert candidates[0].rule == "web_domain"
        assert candidates[0].inferred_domain == "https://dataflow.io"

    def test_business_noun(self) -> None:
        candidates = self.stage.extract("Maple startup is hiring")

        assert [c.name for c in candidates] == ["Maple startup"]
        assert candidates[0].rule == "business_noun"

    def test_generic_names_are_stoplisted(self) -> None:
        assert self.stage.extract("The Company announced layoffs") == []

    def test_duplicate_names_are_collapsed(self) -> None:
        candidates = self.stage.extract("Acme Corp hired staff and Acme Corp grew")
        assert [c.name for c in candidates] == ["Acme Corp"]

    def test_empty_or_missing_text(self) -> None:
        assert self.stage.extract("") == []
        assert self.stage.extract(None) == []
        assert self.stage.extract("no capitalized names here") == []

    def test_process_links_source_mention(self) -> None:
        mention = RawMention(source=SourceType.NEWS_ARTICLE, text="Acme Corp raised funding")
        candidates = self.stage.process(mention)

        assert len(candidates) == 1
        assert candidates[0].source_mention == mention

    def test_custom_stoplist(self) -> None:
        stage = EntityExtractionStage(stoplist=["Acme Corp"])
        assert stage.extract("Acme Corp raised funding") == []
