import uvicorn
import os
import sys
from pathlib import Path

# Set TEST_MODE to True BEFORE anything else is imported
os.environ['TEST_MODE'] = os.environ.get('TEST_MODE', 'True')
# the in-memory test database has no tables until they are created
os.environ.setdefault('CREATE_TABLES_ON_STARTUP', 'True')

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

print(f"--- Running with TEST_MODE={os.environ['TEST_MODE']} ---")

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    src_path = str(PROJECT_ROOT / "src")

    uvicorn.run(
        "src.tuition_track.main:app",
        host="127.0.0.1",
        port=port,
        reload=True,
        reload_dirs=[src_path]
    )
