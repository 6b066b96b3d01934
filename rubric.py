# rubric.py
# Built-in qualitative rubric (70 points, 23 items in 6 categories)

import logging

from extensions import db
from models import Criterion

logger = logging.getLogger(__name__)

# (code, category, sub_category, name, max_score)
DEFAULT_RUBRIC = [
    ('c1-1', '전략 및 방법론', '제안배경 및 사업목표', '제안 배경 및 목적 기술, 사업범위·제안요건 식별의 구체성', 4),
    ('c1-2', '전략 및 방법론', '추진전략 및 사업추진 체계', '추진전략 타당성, 수행조직 구성 및 협력 방안의 적절성', 2),
    ('c1-3', '전략 및 방법론', '사업추진 방법론', '사업추진방법의 적절성 및 표준 프레임워크 적용 방안', 3),
    ('c1-4', '전략 및 방법론', '기대효과', '수행결과에 대한 기대효과 및 결과물 활용방안', 1),
    ('c2-1', '기술 및 기능', '시스템 요구사항', '요구 규격 충족 여부, 확장 가능성 및 유지관리 방안', 4),
    ('c2-2', '기술 및 기능', '기능 요구사항', '기능 요구사항·기대사항·제약사항에 대한 구현 방안의 구체성', 6),
    ('c2-3', '기술 및 기능', '보안 요구사항', '보안 구현방안의 구체성, 설계~검증 단계별 보안 적용', 3),
    ('c2-4', '기술 및 기능', '데이터 요구사항', '데이터 전환 계획·검증 방법 및 오류 발생 시 처리 방안', 3),
    ('c2-5', '기술 및 기능', '시스템운영 요구사항', '운영 절차 및 운영 중 이상사태 대응방안의 구체성', 2),
    ('c2-6', '기술 및 기능', '제약사항', '제약조건 충족을 위한 구현 방안 및 테스트 방안', 2),
    ('c3-1', '성능 및 품질', '적용기술', '적용 기술의 확장가능성 및 실현가능성의 구체성', 6),
    ('c3-2', '성능 및 품질', '성능요구사항', '성능 충족을 위한 구현·테스트 방안, 분석도구 활용 방안', 5),
    ('c3-3', '성능 및 품질', '인터페이스 요구사항', '시스템 인터페이스 및 사용자 인터페이스 구축 방안', 3),
    ('c3-4', '성능 및 품질', '품질 요구사항', '분석·설계·구현·테스트 단계별 품질 점검 및 검토 방안', 3),
    ('c4-1', '프로젝트 관리', '일정관리', '수행기간 및 세부 일정계획의 적절성, 산출물 연계', 4),
    ('c4-2', '프로젝트 관리', '품질관리', '품질관리 방안(범위·절차·점검방법) 및 품질보증 인증', 4),
    ('c4-3', '프로젝트 관리', '기밀보안 관리', '기밀 보호 체계 및 보안 대책의 구체성', 3),
    ('c4-4', '프로젝트 관리', '위험 및 이슈관리', '위험·이슈 식별·분석 및 관리계획의 구체성', 2),
    ('c4-5', '프로젝트 관리', '개발 환경', '개발환경 구성의 구체성 및 라이선스 문제 검토', 2),
    ('c5-1', '프로젝트 지원', '시험운영 계획', '개발 시스템의 시험운영 방법의 구체성', 2),
    ('c5-2', '프로젝트 지원', '기술지원, 교육훈련 계획', '기술지원 범위·내용·수준 및 교육훈련 계획의 구체성', 2),
    ('c5-3', '프로젝트 지원', '하자보수 계획', '하자보수 범위·조치절차 및 유지관리 계획의 구체성', 2),
    ('c6-1', '기타', '기타', '제안 내용의 성실성·독창성 및 기타 지원 사항', 2),
]

RUBRIC_TOTAL = sum(item[4] for item in DEFAULT_RUBRIC)


def load_rubric(rubric=DEFAULT_RUBRIC):
    """Insert rubric items that are not in the database yet. Returns the number added."""
    existing = {code for (code,) in db.session.query(Criterion.code)}
    added = 0
    for order, (code, category, sub_category, name, max_score) in enumerate(rubric, start=1):
        if code in existing:
            continue
        db.session.add(Criterion(
            code=code,
            category=category,
            sub_category=sub_category,
            name=name,
            max_score=max_score,
            order=order,
        ))
        added += 1
    db.session.commit()
    if added:
        logger.info("Loaded %d rubric criteria", added)
    return added
