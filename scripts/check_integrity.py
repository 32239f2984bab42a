'''
Read-only consistency report for a TuitionTrack database.

Class events and linked-tuition lists are not protected by foreign keys, so
deleted tuitions can leave traces behind. This prints how many there are.
'''
import asyncio
import sys
from pathlib import Path
from sqlalchemy import text

# --- Path Setup ---
# This file is assumed to be in <project_root>/scripts/check_integrity.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.tuition_track.common.config import settings
from src.tuition_track.database.engine import create_database


async def check_integrity():
    database = create_database(settings.database_url)

    async with database.session_factory() as session:
        print("--- Checking Tuition Integrity ---")

        # 1. Events whose tuition no longer exists (expected after deletes)
        orphaned_events = await session.execute(text("""
            SELECT count(*) FROM class_events ce
            LEFT JOIN tuitions t ON ce.tuition_id = t.id
            WHERE t.id IS NULL
        """))
        count_events = orphaned_events.scalar()

        # 2. Tuitions with only part of the student triple filled in
        partial_students = await session.execute(text("""
            SELECT count(*) FROM tuitions
            WHERE (student_id IS NULL) <> (student_email IS NULL)
               OR (student_id IS NULL) <> (student_name IS NULL)
        """))
        count_partial = partial_students.scalar()

        # 3. Tuitions pointing at a teacher that does not exist
        missing_teachers = await session.execute(text("""
            SELECT count(*) FROM tuitions t
            LEFT JOIN users u ON t.teacher_id = u.id
            WHERE u.id IS NULL
        """))
        count_teachers = missing_teachers.scalar()

        total = await session.execute(text("SELECT count(*) FROM tuitions"))
        total_count = total.scalar()

        print(f"Tuitions: {total_count}")
        print(f"Orphaned Class Events: {count_events}")
        print(f"Partial Student Assignments: {count_partial}")
        print(f"Tuitions Without Teacher: {count_teachers}")

        if count_partial == 0 and count_teachers == 0:
            print("✅ PASS: Integrity Verified.")
        else:
            print("❌ FAIL: Integrity Issues Found.")

    await database.dispose()

if __name__ == "__main__":
    asyncio.run(check_integrity())
