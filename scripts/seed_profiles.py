"""Seed demo member profiles (and an admin) for local development.

Usage: python -m scripts.seed_profiles [--count 20]
"""
import argparse
import asyncio
import random
import sys
sys.path.insert(0, ".")

from sqlalchemy import select
from app.database import async_session_factory
from app.models.user import User
from app.services.user_service import completeness
from app.utils.security import hash_password

DEMO_PASSWORD = "sathi-demo"

FIRST_NAMES = {
    "male": ["Aarav", "Rohit", "Vikas", "Ankit", "Saurabh", "Nitin", "Prateek", "Gaurav"],
    "female": ["Pooja", "Neha", "Shruti", "Anjali", "Priya", "Kavita", "Ritika", "Sakshi"],
}
SURNAMES = ["Gupta", "Seth", "Kanthariya", "Nagaria", "Sethia", "Badonya", "Khard"]
CITIES = [
    ("Jhansi", "Uttar Pradesh"),
    ("Gwalior", "Madhya Pradesh"),
    ("Kanpur", "Uttar Pradesh"),
    ("Datia", "Madhya Pradesh"),
    ("Delhi", "Delhi"),
    ("Indore", "Madhya Pradesh"),
]
EDUCATION = ["B.Com", "B.Tech", "MBA", "M.Sc", "CA", "MBBS"]
OCCUPATIONS = ["Business", "Software Engineer", "Teacher", "Doctor", "Accountant", "Banker"]


def demo_profile(index: int) -> dict:
    gender = random.choice(["male", "female"])
    city, state = random.choice(CITIES)
    return {
        "email": f"member{index}@demo.gahoi.in",
        "name": f"{random.choice(FIRST_NAMES[gender])} {random.choice(SURNAMES)}",
        "gender": gender,
        "age": random.randint(22, 34),
        "marital_status": "unmarried",
        "height_cm": random.randint(150, 185),
        "city": city,
        "state": state,
        "religion": "Hindu",
        "caste": "Gahoi",
        "mother_tongue": "Hindi",
        "education": random.choice(EDUCATION),
        "occupation": random.choice(OCCUPATIONS),
        "bio": "Family-oriented, looking for a caring life partner.",
    }


async def seed(count: int):
    async with async_session_factory() as session:
        profiles = [demo_profile(i) for i in range(1, count + 1)]
        profiles.append(
            {"email": "admin@demo.gahoi.in", "name": "Sathi Admin", "gender": "other", "is_admin": True}
        )
        for data in profiles:
            existing = await session.execute(select(User.id).where(User.email == data["email"]))
            if existing.first() is not None:
                print(f"  {data['email']} already exists, skipping.")
                continue
            user = User(password_hash=hash_password(DEMO_PASSWORD), photos=[], **data)
            user.is_profile_complete = completeness(user)["is_profile_complete"]
            session.add(user)
            print(f"  Seeded {data['name']} <{data['email']}>")
        await session.commit()
    print(f"Done seeding profiles (password: {DEMO_PASSWORD}).")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo Gahoi Sathi profiles")
    parser.add_argument("--count", type=int, default=20, help="Number of member profiles")
    args = parser.parse_args()
    asyncio.run(seed(args.count))
