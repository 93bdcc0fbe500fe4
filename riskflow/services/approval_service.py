"""
승인 및 보고 서비스.

- approval_summary(records): 잔여 위험 평가 완료 현황 (승인 가능 여부)
- approve_all(records, approver, comment): 잔여 위험 평가가 끝난 전체 대상 일괄 승인 (메모리 기록)
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from riskflow.core.exceptions import ValidationError
from riskflow.models.schemas import ApprovalRecord, ApprovalSummary, ChecklistRecord
from riskflow.services.workflow_gate import eligible_for_residual, is_residual_done

logger = logging.getLogger(__name__)

# 인메모리 저장 (1차 구현). 승인 이력은 프로세스 재시작 시 초기화.
_approvals: List[ApprovalRecord] = []


def approval_summary(records: Sequence[ChecklistRecord]) -> ApprovalSummary:
    """잔여 위험 평가 대상 중 완료/미완료 집계."""
    eligible = [r for r in records if eligible_for_residual(r)]
    pending = [r.code for r in eligible if not is_residual_done(r)]
    return ApprovalSummary(
        eligible=len(eligible),
        residual_done=len(eligible) - len(pending),
        ready=bool(eligible) and not pending,
        pending_codes=pending,
        approvals=list(_approvals),
    )


def approve_all(
    records: Sequence[ChecklistRecord],
    approver: str,
    comment: Optional[str] = None,
) -> ApprovalRecord:
    """
    최종 승인. 잔여 위험 평가 대상이 1건 이상이고 모두 완료되어야 한다.
    """
    summary = approval_summary(records)
    if not summary.ready:
        if not summary.eligible:
            raise ValidationError("approval", "승인할 잔여 위험 평가 대상이 없습니다.")
        raise ValidationError(
            "approval",
            f"잔여 위험 평가 미완료 항목이 있습니다: {', '.join(summary.pending_codes)}",
        )

    now = datetime.now(timezone.utc)
    record = ApprovalRecord(
        approval_id=f"apv_{len(_approvals) + 1}_{now.strftime('%Y%m%d%H%M%S')}",
        approver=approver.strip(),
        comment=comment,
        approved_codes=[r.code for r in records if eligible_for_residual(r)],
        approved_at=now,
    )
    _approvals.append(record)
    logger.info("approved: id=%s approver=%s items=%d", record.approval_id, record.approver,
                len(record.approved_codes))
    return record


def list_approvals() -> List[ApprovalRecord]:
    return list(_approvals)


def reset_approvals() -> None:
    """테스트용 초기화."""
    _approvals.clear()
