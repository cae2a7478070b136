"""Run a headless lucky draw and grouping over the demo roster."""

from __future__ import annotations

import asyncio
import logging
import sys

from luckygroup.db.engine import get_sessionmaker, make_engine
from luckygroup.lucky_draw import DrawTiming
from luckygroup.models import Base
from luckygroup.workflows import LuckyGroupApp, load_theme, run_draw


async def main(draws: int = 3) -> None:
    """Draw ``draws`` winners for a short prize list, then build groups."""
    app = LuckyGroupApp(timing=DrawTiming(tick_interval=0.05, min_duration=0.5, max_duration=1.0))
    app.roster.load_demo()
    app.prizes.add("Gold, Silver")
    app.proceed()

    shown: list[str] = []
    app.engine.subscribe("display", lambda participant: shown.append(participant.name))
    for _ in range(draws):
        record = await run_draw(app.engine)
        print(f"#{record.sequence} {record.participant.name} -> {record.prize.name}")
        app.engine.acknowledge()
    print(f"Names shown while rolling: {len(shown)}")
    print(f"Remaining: {app.engine.remaining_count} / {app.engine.total_count}")

    for group in app.generate_groups(4):
        print(f"{group.label}: {', '.join(m.name for m in group.members)}")
    app.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    engine = make_engine()
    Base.metadata.create_all(engine)
    with get_sessionmaker(engine).begin() as session:
        print(f"Theme: {load_theme(session)}")
    asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else 3))
