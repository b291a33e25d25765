import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .analysis.analyzer import StemmerAnalyzer
from .analysis.base import Token
from .analysis.context import AnalysisContext

logger = logging.getLogger(__name__)


@dataclass
class AnalyzedFile:
    source_path: str
    field_name: str
    tokens: List[Token] = field(default_factory=list)


class AnalysisPipeline:
    """
    Batch analysis of text files.

    Files are read lazily by the tokenizer and analyzed on a thread pool.
    Every worker thread gets its own AnalysisContext, so pipelines are reused
    across the files a worker handles but never shared between threads.

    Usage:
        p = AnalysisPipeline(analyzer, field_name="body", workers=4)
        results = p.run(paths)
        for result in results:
            if result is not None:
                p.save_jsonl(result, Path("output"))

    Files that cannot be read or decoded are logged and reported as None.
    """

    def __init__(
        self,
        analyzer: StemmerAnalyzer,
        field_name: str,
        workers: int = 4,
        encoding: str = "utf-8",
    ):
        self.analyzer = analyzer
        self.field_name = field_name
        self.workers = max(1, workers)
        self.encoding = encoding
        self._local = threading.local()

    def _context(self) -> AnalysisContext:
        context = getattr(self._local, "context", None)
        if context is None:
            context = AnalysisContext(name=threading.current_thread().name)
            self._local.context = context
        return context

    def analyze_file(self, path: Union[str, Path]) -> Optional[AnalyzedFile]:
        """Analyze one file with the calling thread's context. Returns None on failure."""
        path = Path(path)
        try:
            with open(path, "r", encoding=self.encoding) as f:
                tokens = list(self.analyzer.analyze(self.field_name, f, self._context()))
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not analyze {path}: {e}")
            return None

        logger.debug(f"{path}: {len(tokens)} tokens")
        return AnalyzedFile(source_path=str(path), field_name=self.field_name, tokens=tokens)

    def run(
        self, paths: List[Union[str, Path]], show_progress: bool = False
    ) -> List[Optional[AnalyzedFile]]:
        """
        Analyze every path and return results in input order.

        Failed files are represented as None.
        """
        paths = [Path(p) for p in paths]
        if not paths:
            return []

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(self.analyze_file, p) for p in paths]
            if not show_progress:
                results = [f.result() for f in futures]
            else:
                from rich.progress import Progress, SpinnerColumn

                results = []
                with Progress(
                    SpinnerColumn(), *Progress.get_default_columns(), transient=True
                ) as progress:
                    task = progress.add_task(
                        f"Analyzing {len(paths)} file(s)...", total=len(paths)
                    )
                    for future in futures:
                        results.append(future.result())
                        progress.update(task, advance=1)

        failed = sum(1 for r in results if r is None)
        if failed:
            logger.warning(f"{failed}/{len(paths)} file(s) could not be analyzed")
        return results

    def save_jsonl(self, result: AnalyzedFile, output_dir: Union[str, Path]) -> Path:
        """Write one JSON line per token of ``result`` into output_dir."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        out_path = output_dir / f"{Path(result.source_path).stem}.jsonl"

        with open(out_path, "w", encoding="utf-8") as f:
            for token in result.tokens:
                text, start, end, increment, token_type = token.as_tuple()
                record = {
                    "text": text,
                    "start": start,
                    "end": end,
                    "position_increment": increment,
                    "type": token_type,
                }
                if token.part_of_speech is not None:
                    record["pos"] = token.part_of_speech
                f.write(json.dumps(record, ensure_ascii=False) + "\n")

        logger.info(f"Saved {len(result.tokens)} tokens to {out_path}")
        return out_path
