import io
import threading

import pytest
from lemmastream.errors import ConfigurationError, ResourceLoadError


class FakeLemmatizer:
    LEXICON = {
        "running": [("run", "VERB")],
        "cats": [("cat", "NOUN")],
        "went": [("go", "VERB")],
    }

    def lemmatize(self, surface):
        return self.LEXICON.get(surface.lower(), [])


def _analyzer(stop_words=None, **kwargs):
    from lemmastream.analysis.analyzer import StemmerAnalyzer
    from lemmastream.analysis.lemmatizer import LemmatizerConfig

    lemmatizers = {
        "body": LemmatizerConfig(
            FakeLemmatizer(), return_original=True, return_oov_original=True
        ),
        "strict": LemmatizerConfig(FakeLemmatizer()),
    }
    return StemmerAnalyzer(lemmatizers, stop_words, **kwargs)


def _pairs(tokens):
    return [(t.text, t.position_increment) for t in tokens]


class TestGenericBranch:
    def test_lowercases_without_lemmatizer(self):
        analyzer = _analyzer()
        assert [t.text for t in analyzer.analyze("title", "ABC")] == ["abc"]

    def test_unknown_field_uses_standard_filter(self):
        analyzer = _analyzer()
        tokens = list(analyzer.analyze("title", "John's U.S.A. trip"))
        assert [t.text for t in tokens] == ["john", "usa", "trip"]

    def test_no_lemmatizer_registry_at_all(self):
        from lemmastream.analysis.analyzer import StemmerAnalyzer

        analyzer = StemmerAnalyzer(stop_words=None)
        assert [t.text for t in analyzer.analyze("body", "Running Cats")] == [
            "running",
            "cats",
        ]


class TestLemmaBranch:
    def test_lemma_and_original(self):
        analyzer = _analyzer()
        assert _pairs(analyzer.analyze("body", "Running")) == [("run", 1), ("running", 0)]

    def test_oov_is_kept_or_dropped_per_field(self):
        analyzer = _analyzer()
        kept = list(analyzer.analyze("body", "cats purr"))
        dropped = list(analyzer.analyze("strict", "cats purr"))
        assert [t.text for t in kept] == ["cat", "cats", "purr"]
        assert [t.text for t in dropped] == ["cat"]

    def test_original_forms_are_lowercased(self):
        analyzer = _analyzer()
        assert [t.text for t in analyzer.analyze("body", "WENT")] == ["go", "went"]

    def test_stopwords_apply_after_lemmatizing(self):
        analyzer = _analyzer(stop_words={"go"})
        assert _pairs(analyzer.analyze("strict", "went home")) == []
        assert _pairs(analyzer.analyze("body", "went home")) == [("went", 1), ("home", 1)]


class TestStopWords:
    def test_position_increments_enabled(self):
        analyzer = _analyzer(stop_words={"the"})
        assert _pairs(analyzer.analyze("title", "the cat sat")) == [("cat", 2), ("sat", 1)]

    def test_position_increments_disabled(self):
        analyzer = _analyzer(stop_words={"the"}, enable_stop_position_increments=False)
        assert _pairs(analyzer.analyze("title", "the cat sat")) == [("cat", 1), ("sat", 1)]

    def test_default_english_stop_set(self):
        from lemmastream.analysis.analyzer import StemmerAnalyzer

        analyzer = StemmerAnalyzer()
        assert [t.text for t in analyzer.analyze("title", "The Cat and the Hat")] == [
            "cat",
            "hat",
        ]

    def test_stopwords_from_stream(self):
        analyzer = _analyzer(stop_words=io.StringIO("cat\n  dog  bird\n"))
        assert [t.text for t in analyzer.analyze("title", "cat dog fish")] == ["fish"]

    def test_stopwords_from_file(self, tmp_path):
        path = tmp_path / "stop.txt"
        path.write_text("Fish\n", encoding="utf-8")
        analyzer = _analyzer(stop_words=path)
        assert [t.text for t in analyzer.analyze("title", "cat fish")] == ["cat"]

    def test_unreadable_stopword_file_fails_at_construction(self, tmp_path):
        with pytest.raises(ResourceLoadError):
            _analyzer(stop_words=tmp_path / "missing.txt")

    def test_empty_stop_set_disables_filter(self):
        from lemmastream.analysis.filters import StopFilter

        analyzer = _analyzer(stop_words=set())
        stream = analyzer.token_stream("title", "the cat")
        assert not isinstance(stream, StopFilter)
        assert [t.text for t in stream] == ["the", "cat"]


class TestConfiguration:
    def test_non_positive_max_token_length(self):
        with pytest.raises(ConfigurationError):
            _analyzer(max_token_length=0)

    def test_setter_validates(self):
        analyzer = _analyzer()
        with pytest.raises(ConfigurationError):
            analyzer.max_token_length = -1
        assert analyzer.max_token_length == 255

    def test_long_tokens_never_appear(self):
        analyzer = _analyzer(max_token_length=4)
        tokens = list(analyzer.analyze("title", "tiny enormous cat"))
        assert [t.text for t in tokens] == ["tiny", "cat"]

    def test_from_config(self):
        from lemmastream.analysis.analyzer import StemmerAnalyzer
        from lemmastream.config import AnalyzerConfig

        analyzer = StemmerAnalyzer.from_config(AnalyzerConfig(stop_words=None))
        assert [t.text for t in analyzer.analyze("title", "The End")] == ["the", "end"]

    def test_from_config_runs_subclass_init(self):
        from lemmastream.analysis.analyzer import StemmerAnalyzer
        from lemmastream.config import AnalyzerConfig

        class TitleAnalyzer(StemmerAnalyzer):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                self.default_field = "title"

        config = AnalyzerConfig(stop_words=None, max_token_length=10)
        analyzer = TitleAnalyzer.from_config(config)
        assert isinstance(analyzer, TitleAnalyzer)
        assert analyzer.default_field == "title"
        assert analyzer.config is config

    def test_config_is_immutable(self):
        import dataclasses

        analyzer = _analyzer()
        with pytest.raises(dataclasses.FrozenInstanceError):
            analyzer.config.max_token_length = 10
        with pytest.raises(TypeError):
            analyzer.config.field_lemmatizers["other"] = None


class TestReuse:
    TEXT = "The children went running past 3 cats at www.example.com."

    def test_reused_stream_matches_fresh_stream(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer(stop_words={"the", "at"})
        fresh = [t.as_tuple() for t in analyzer.analyze("body", self.TEXT)]
        with AnalysisContext() as context:
            first = [t.as_tuple() for t in analyzer.analyze("body", self.TEXT, context)]
            list(analyzer.analyze("body", "something else entirely", context))
            again = [t.as_tuple() for t in analyzer.analyze("body", self.TEXT, context)]
        assert first == fresh
        assert again == fresh

    def test_pipeline_is_built_once_per_field(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer()
        context = AnalysisContext()
        list(analyzer.analyze("body", "one", context))
        state = context.get("body")
        list(analyzer.analyze("body", "two", context))
        assert context.get("body") is state
        assert len(context) == 1

    def test_fields_get_their_own_pipeline(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer()
        context = AnalysisContext()
        body = [t.text for t in analyzer.analyze("body", "running", context)]
        title = [t.text for t in analyzer.analyze("title", "running", context)]
        body_again = [t.text for t in analyzer.analyze("body", "running", context)]
        assert body == body_again == ["run", "running"]
        assert title == ["running"]
        assert sorted(context) == ["body", "title"]

    def test_max_token_length_change_applies_to_reused_pipeline(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer()
        context = AnalysisContext()
        assert [t.text for t in analyzer.analyze("title", "abcd ab", context)] == ["abcd", "ab"]
        state = context.get("title")

        analyzer.max_token_length = 3
        assert [t.text for t in analyzer.analyze("title", "abcd ab", context)] == ["ab"]
        assert context.get("title") is state

    def test_fresh_replaces_cached_pipeline(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer()
        context = AnalysisContext()
        list(analyzer.analyze("body", "one", context))
        state = context.get("body")
        tokens = [t.text for t in analyzer.analyze("body", "cats", context, fresh=True)]
        assert tokens == ["cat", "cats"]
        assert context.get("body") is not state

    def test_reuse_with_stream_source(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer()
        context = AnalysisContext()
        expected = [t.as_tuple() for t in analyzer.analyze("body", self.TEXT)]
        got = [t.as_tuple() for t in analyzer.analyze("body", io.StringIO(self.TEXT), context)]
        assert got == expected

    def test_closing_context_drops_pipelines(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer()
        with AnalysisContext() as context:
            list(analyzer.analyze("body", "one", context))
            assert "body" in context
        assert len(context) == 0

    def test_tokens_are_pulled_lazily(self):
        from lemmastream.analysis.context import AnalysisContext

        class CountingReader(io.StringIO):
            reads = 0

            def read(self, size=-1):
                CountingReader.reads += 1
                return super().read(size)

        analyzer = _analyzer()
        source = CountingReader("word " * 10000)
        tokens = analyzer.analyze("title", source, AnalysisContext())
        next(tokens)
        assert CountingReader.reads == 1

    def test_cjk_tokens_are_pulled_lazily(self):
        from lemmastream.analysis.context import AnalysisContext

        class CountingReader(io.StringIO):
            reads = 0

            def read(self, size=-1):
                CountingReader.reads += 1
                return super().read(size)

        analyzer = _analyzer()
        source = CountingReader("中文" * 20000)
        tokens = analyzer.analyze("title", source, AnalysisContext())
        assert next(tokens).text == "中"
        assert CountingReader.reads == 1


class TestConcurrentContexts:
    def test_one_context_per_thread(self):
        from lemmastream.analysis.context import AnalysisContext

        analyzer = _analyzer(stop_words={"the"})
        docs = [f"The runner {i} went running with {i} cats" for i in range(50)]
        expected = [[t.as_tuple() for t in analyzer.analyze("body", d)] for d in docs]
        results = {}
        errors = []

        def worker(worker_id):
            try:
                context = AnalysisContext(name=f"worker-{worker_id}")
                results[worker_id] = [
                    [t.as_tuple() for t in analyzer.analyze("body", d, context)] for d in docs
                ]
            except Exception as e:  # pragma: no cover - surfaced by the assert below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        for worker_id in range(4):
            assert results[worker_id] == expected
