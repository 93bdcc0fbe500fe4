"""
Checklist 시트 CSV 내보내기: 시트 전체를 조회해 엑셀 호환 CSV(UTF-8 BOM)로 저장합니다.
SHEETS_API_URL 미설정 시 데모 데이터로 동작 (Redis 불필요).

실행 방법 (저장소 루트에서):
  python -m scripts.export_checklist [basic|full] [출력파일]
"""
import asyncio
import os
import sys
from pathlib import Path

# 저장소 루트를 path에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from riskflow.core.config import settings
from riskflow.core.exceptions import FetchError
from riskflow.services.checklist_service import ChecklistService, get_record_store
from riskflow.services.csv_export import EXPORT_VARIANTS, export_columns


async def main(variant: str = "basic", output: str = "") -> int:
    if variant not in EXPORT_VARIANTS:
        print(f" 지원하지 않는 형식입니다: {variant} (basic | full)")
        return 1

    store = get_record_store()
    service = ChecklistService(
        store,
        sheet_name=settings.CHECKLIST_SHEET,
        matrix_bound=settings.matrix_bound,
        accept_threshold=settings.ACCEPT_THRESHOLD,
        use_cache=False,
    )
    print(f"{settings.CHECKLIST_SHEET} 시트 조회 시작...")
    try:
        result = await service.reload()
    except FetchError as e:
        print("조회 실패:", e)
        return 1
    finally:
        await store.close()
    print(f"  완료: {result.count}건")

    path = Path(output or f"checklist_{variant}.csv")
    # BOM 포함 문자열을 그대로 기록 (newline=""로 LF 유지)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(service.export_csv(export_columns(variant)))
    print(f"저장: {path}")
    return 0


if __name__ == "__main__":
    args = sys.argv[1:]
    sys.exit(asyncio.run(main(*args[:2])))
