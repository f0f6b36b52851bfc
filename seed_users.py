"""
seed_users.py
─────────────
Creates the first admin account (and optionally a teacher) with a
bcrypt-hashed password. Run ONCE after the migrations:

    python seed_users.py

Reads from .env — change SEED_* values there, or edit defaults below.
Set SEED_TEACHER_EMAIL to also create a teacher.
"""
import asyncio
import os
from dotenv import load_dotenv

load_dotenv()

# ── Change these in .env or edit here ────────────────────────────────
ADMIN_FIRST_NAME = os.getenv("SEED_ADMIN_FIRST_NAME", "Site")
ADMIN_LAST_NAME  = os.getenv("SEED_ADMIN_LAST_NAME",  "Admin")
ADMIN_EMAIL      = os.getenv("SEED_ADMIN_EMAIL",      "admin@example.com")
ADMIN_PASSWORD   = os.getenv("SEED_ADMIN_PASSWORD",   "admin123")

TEACHER_EMAIL    = os.getenv("SEED_TEACHER_EMAIL")
TEACHER_PASSWORD = os.getenv("SEED_TEACHER_PASSWORD", "teacher123")
# ─────────────────────────────────────────────────────────────────────


async def _ensure_user(db, *, email, password, role, first_name, last_name):
    from sqlalchemy import select
    from app.core.security import hash_password_async
    from app.models.user import User

    existing = (await db.execute(
        select(User).where(User.email == email)
    )).scalar_one_or_none()

    if existing:
        print(f"⚠️  {role.value.title()} already exists: {email} — no changes made.")
        return None

    user = User(
        email=email,
        password_hash=await hash_password_async(password),
        role=role,
        first_name=first_name,
        last_name=last_name,
        active=True,
    )
    db.add(user)
    await db.flush()
    return user


async def seed():
    from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
    from app.models.user import Role

    engine  = create_async_engine(os.environ["DATABASE_URL"], echo=False)
    Session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with Session() as db:
        admin = await _ensure_user(
            db,
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            role=Role.ADMIN,
            first_name=ADMIN_FIRST_NAME,
            last_name=ADMIN_LAST_NAME,
        )
        teacher = None
        if TEACHER_EMAIL:
            teacher = await _ensure_user(
                db,
                email=TEACHER_EMAIL,
                password=TEACHER_PASSWORD,
                role=Role.TEACHER,
                first_name="Demo",
                last_name="Teacher",
            )
        await db.commit()

    await engine.dispose()

    for user in (admin, teacher):
        if user is None:
            continue
        print(f"\n✅  {user.role.value.title()} created successfully!")
        print(f"    ID    : {user.id}")
        print(f"    Name  : {user.display_name}")
        print(f"    Email : {user.email}")

    print()
    print("🔑  Login endpoint : POST /api/auth/login")
    print('    Body           : {"email": "...", "password": "..."}')
    print()
    print("⚠️   Change seeded passwords after first login!")


if __name__ == "__main__":
    asyncio.run(seed())
