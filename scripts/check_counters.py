import asyncio
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import async_session_maker
from app.services.counter_service import find_counter_drift, repair_counters


async def check_counters(fix: bool):
    async with async_session_maker() as db:
        if fix:
            drift = await repair_counters(db)
            await db.commit()
        else:
            drift = await find_counter_drift(db)

        if not drift:
            print("All counters match live counts.")
            return
        print(f"{'Repaired' if fix else 'Found'} {len(drift)} drifted counter(s):")
        for item in drift:
            print(f"  - {item.table} {item.row_id}: stored={item.stored} actual={item.actual}")


if __name__ == "__main__":
    asyncio.run(check_counters(fix="--fix" in sys.argv[1:]))
