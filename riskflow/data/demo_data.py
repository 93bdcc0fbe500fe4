"""데모/샘플 데이터: SHEETS_API_URL 미설정 시 인메모리 저장소의 Checklist 시트 초기값."""
from typing import Any, Dict, List


def _row(area: str, domain: str, code: str, item: str, **values: str) -> Dict[str, Any]:
    return {"type": "ISMS-P", "area": area, "domain": domain, "code": code, "itemCode": item, **values}


def get_demo_checklist_rows() -> List[Dict[str, Any]]:
    """ISMS-P 통제 항목 일부 (단계별 진행 상태가 섞여 있음)."""
    mgmt = "1. 관리체계 수립 및 운영"
    protect = "2. 보호대책 요구사항"
    return [
        _row(mgmt, "1.1 관리체계 기반 마련", "1.1.1", "경영진의 참여"),
        _row(mgmt, "1.1 관리체계 기반 마련", "1.1.2", "최고책임자의 지정",
             status="CISO 지정 및 이사회 보고 완료", result="양호"),
        _row(mgmt, "1.1 관리체계 기반 마련", "1.1.3", "조직 구성",
             status="정보보호위원회 미운영", result="취약",
             result_detail="위원회 구성은 되어 있으나 연간 회의 실적 없음"),
        _row(mgmt, "1.2 위험 관리", "1.2.1", "정보자산 식별",
             status="자산 목록 최신화 누락", result="취약",
             result_detail="클라우드 자산 미포함", impact="4", likelihood="3"),
        _row(mgmt, "1.2 위험 관리", "1.2.2", "현황 및 흐름분석",
             status="개인정보 흐름도 2년 전 작성", vulnResult="vuln",
             reason="신규 서비스 흐름 미반영", impact="3", likelihood="4",
             treatment_strategy="Mitigate", treatment_plan="개인정보 흐름도 갱신",
             treatment_owner="개인정보보호팀", treatment_due_date="2026-12-31",
             treatment_status="Done"),
        _row(mgmt, "1.2 위험 관리", "1.2.3", "위험 평가",
             status="연 1회 위험평가 수행", result="good"),
        _row(protect, "2.5 인증 및 권한관리", "2.5.1", "사용자 계정 관리",
             status="퇴사자 계정 잔존", result="취약",
             result_detail="퇴사자 3명 계정 활성 상태", impact="5", likelihood="4",
             treatment_strategy="Mitigate", treatment_plan="인사 시스템 연동 자동 회수",
             treatment_owner="인프라팀", treatment_due_date="2026-11-30",
             treatment_status="Done", residual_impact="4", residual_likelihood="3",
             residual_detail="자동 회수 적용 후 재점검", residual_status="Done"),
        _row(protect, "2.5 인증 및 권한관리", "2.5.2", "사용자 식별"),
        _row(protect, "2.6 접근통제", "2.6.1", "네트워크 접근",
             status="내부망 분리 적용", result="양호"),
        _row(protect, "2.6 접근통제", "2.6.2", "정보시스템 접근",
             status="서버 접근제어 솔루션 일부 우회 가능", result="취약",
             impact="2", likelihood="2", treatment_strategy="Accept",
             accept_reason="우회 경로는 비상 점검용으로 승인된 절차", treatment_status="Planned"),
        _row(protect, "2.9 시스템 및 서비스 운영관리", "2.9.4", "로그 및 접속기록 관리",
             status="접속기록 1년 보관"),
        _row(protect, "", "2.12.1", "재해 복구 체계 구축"),
    ]
