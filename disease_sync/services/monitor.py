import time
from typing import Callable, List, Tuple
from loguru import logger

class PerformanceMonitor:
    """
    运行计时器

    启动时开始计时，checkpoint 按顺序追加 (标签, 距启动秒数)。
    单线程运行，检查点列表由本对象独占；list.append 在 GIL 下是原子的。
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._start = clock()
        self._checkpoints: List[Tuple[str, float]] = []

    def elapsed(self) -> float:
        return self._clock() - self._start

    def checkpoint(self, label: str) -> float:
        elapsed = self.elapsed()
        self._checkpoints.append((label, elapsed))
        logger.info(f"[{label}] Elapsed: {elapsed:.2f}s")
        return elapsed

    @property
    def checkpoints(self) -> Tuple[Tuple[str, float], ...]:
        return tuple(self._checkpoints)

    def report(self) -> List[str]:
        """打印总耗时和检查点顺序，返回标签列表"""
        logger.info("=== PERFORMANCE REPORT ===")
        logger.info(f"Total execution time: {self.elapsed():.2f}s")
        labels = [label for label, _ in self._checkpoints]
        for idx, label in enumerate(labels, 1):
            logger.info(f" [{idx}] {label}")
        return labels
