"""Periodic, per-family refresh scheduling."""

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from .service import NewsService

console = Console()


@dataclass
class RefreshJob:
    """Refresh timing for one family."""

    family: str
    interval: float
    initial_delay: float = 0.0


class RefreshScheduler:
    """Run each family's refresh loop as an independent asyncio task."""

    def __init__(self, service: NewsService, jobs: Optional[List[RefreshJob]] = None) -> None:
        """
        Initialize scheduler.

        Args:
            service: News service whose families are refreshed
            jobs: Refresh timings (defaults to the service's family config)
        """
        self.service = service
        self.jobs = jobs if jobs is not None else self.jobs_from_config(service)
        self._tasks: List[asyncio.Task] = []

    @staticmethod
    def jobs_from_config(service: NewsService) -> List[RefreshJob]:
        """One job per enabled family, using its interval and warm-up delay."""
        return [
            RefreshJob(
                family=name,
                interval=pipeline.config.refresh_minutes * 60,
                initial_delay=pipeline.config.initial_delay_seconds,
            )
            for name, pipeline in service.families.items()
        ]

    async def run_once(self, family: str) -> bool:
        """Refresh a family; failures are logged and the old snapshot kept."""
        try:
            await self.service.refresh(family)
            return True
        except asyncio.TimeoutError:
            console.print(f"[red]Refresh of {escape(family)} exceeded its time budget; keeping previous cache[/red]")
        except Exception as e:
            console.print(f"[red]Refresh of {escape(family)} failed: {escape(str(e))}; keeping previous cache[/red]")
        return False

    async def _loop(self, job: RefreshJob) -> None:
        if job.initial_delay:
            await asyncio.sleep(job.initial_delay)
        await self.service.initialize(job.family)
        while True:
            await self.run_once(job.family)
            await asyncio.sleep(job.interval)

    def start(self) -> List[asyncio.Task]:
        """Start one task per job on the running loop."""
        if not self._tasks:
            self._tasks = [
                asyncio.create_task(self._loop(job), name=f"refresh-{job.family}")
                for job in self.jobs
            ]
        return self._tasks

    async def stop(self) -> None:
        """Cancel all refresh tasks."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def run_forever(self) -> None:
        """Refresh on schedule until cancelled; each family initializes its strategies after its warm-up."""
        tasks = self.start()
        try:
            await asyncio.gather(*tasks)
        finally:
            await self.stop()
