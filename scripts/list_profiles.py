import asyncio
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from app.db.session import async_session_maker
from app.models.profile import Profile

async def list_profiles():
    async with async_session_maker() as session:
        result = await session.execute(
            select(Profile.email, Profile.display_name, Profile.created_at).order_by(Profile.created_at)
        )
        profiles = result.all()
        if not profiles:
            print("No profiles found in database.")
        else:
            print("Current Profiles:")
            for email, display_name, created_at in profiles:
                print(f"- {display_name or '(no name)'} ({email}) | Joined: {created_at:%Y-%m-%d}")

if __name__ == "__main__":
    asyncio.run(list_profiles())
