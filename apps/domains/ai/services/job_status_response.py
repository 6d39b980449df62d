# apps/domains/ai/services/job_status_response.py
# Job 상태 조회 응답 생성 (POST 응답 / GET /ai/jobs/<id>/ 공통)

from __future__ import annotations


def build_job_status_response(job) -> dict:
    """
    AIJobModel → API 응답 dict
    - result: 성공 시 {questions, logs, test_id}
    - error: 실패 사유 (empty_generation, claim_expired, 예외 메시지 ...)
    """
    return {
        "job_id": job.pk,
        "status": job.status,
        "payload": job.payload,
        "persist": job.persist,
        "test_id": job.exam_id,
        "result": job.result,
        "error": job.error or None,
        "attempts": job.attempts,
        "created_at": job.created_at,
        "started_at": job.started_at,
        "finished_at": job.finished_at,
    }
