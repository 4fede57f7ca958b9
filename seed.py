"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 2 demo users (password: ``password123``)
  - 6 sample distance queries between well-known cities, computed with the
    same Haversine function the API uses (no geocoder calls)
"""

import asyncio

from src.config import settings
from src.domain.distance import calculate_distance
from src.infrastructure.database import build_engine, build_session_factory
from src.infrastructure.repositories import DistanceQueryRepository, UserRepository
from src.services.auth_service import hash_password

USERS = [
    {"username": "demo", "email": "demo@example.com"},
    {"username": "traveller", "email": "traveller@example.com"},
]

# (address, lat, lon)
CITIES = {
    "New York, NY": (40.7128, -74.0060),
    "Los Angeles, CA": (34.0522, -118.2437),
    "London, UK": (51.5074, -0.1278),
    "Paris, France": (48.8566, 2.3522),
    "Tokyo, Japan": (35.6762, 139.6503),
    "Sydney, Australia": (-33.8688, 151.2093),
}

QUERIES = [
    # (user index or None, source, destination)
    (0, "New York, NY", "Los Angeles, CA"),
    (0, "London, UK", "Paris, France"),
    (0, "Tokyo, Japan", "Sydney, Australia"),
    (1, "Paris, France", "Tokyo, Japan"),
    (1, "Los Angeles, CA", "Sydney, Australia"),
    (None, "London, UK", "New York, NY"),
]


async def seed(session_factory) -> None:
    async with session_factory() as session:
        user_repo = UserRepository(session)
        query_repo = DistanceQueryRepository(session)

        users = [
            await user_repo.create(
                username=u["username"],
                email=u["email"],
                password_hash=hash_password("password123"),
            )
            for u in USERS
        ]
        print(f"  Created {len(users)} users")

        for user_idx, source, destination in QUERIES:
            (src_lat, src_lon) = CITIES[source]
            (dst_lat, dst_lon) = CITIES[destination]
            await query_repo.create(
                source=source,
                destination=destination,
                distance=calculate_distance(src_lat, src_lon, dst_lat, dst_lon),
                source_lat=src_lat,
                source_lon=src_lon,
                destination_lat=dst_lat,
                destination_lon=dst_lon,
                user_id=users[user_idx].id if user_idx is not None else None,
            )
        print(f"  Created {len(QUERIES)} distance queries")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    engine = build_engine(settings)
    try:
        await seed(build_session_factory(engine))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
