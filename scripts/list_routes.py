import sys
from pathlib import Path

# 저장소 루트를 path에 추가 (scripts/list_routes.py 기준)
sys.path.append(str(Path(__file__).resolve().parent.parent))

from fastapi.routing import APIRoute

from riskflow.main import app


def list_routes():
    routes = []
    for route in app.routes:
        if isinstance(route, APIRoute):
            routes.append({
                "path": route.path,
                "methods": sorted(list(route.methods))
            })

    # Sort by path
    routes.sort(key=lambda x: x["path"])

    print(f"{'Path':<60} {'Methods'}")
    print("-" * 80)
    for r in routes:
        print(f"{r['path']:<60} {r['methods']}")


if __name__ == "__main__":
    list_routes()
