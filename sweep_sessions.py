"""
sweep_sessions.py
─────────────────
Deletes expired login sessions and expired visual-password challenges.
Expired sessions are already cleaned up lazily on lookup; this catches the
ones nobody presents again. Safe to run at any time, e.g. from cron:

    */30 * * * *  cd /srv/reading-api && python sweep_sessions.py
"""
import asyncio
from dotenv import load_dotenv

load_dotenv()


async def main():
    from app.core.database import AsyncSessionLocal, engine
    from app.services.attempt_tracker import sweep_challenges
    from app.services.session_service import sweep_expired

    async with AsyncSessionLocal() as db:
        sessions = await sweep_expired(db)
        challenges = await sweep_challenges(db)
        await db.commit()

    await engine.dispose()

    print(f"🧹  Expired sessions removed   : {sessions}")
    print(f"🧹  Expired challenges removed : {challenges}")


if __name__ == "__main__":
    asyncio.run(main())
