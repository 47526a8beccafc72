"""Sample articles for a fresh news collection (SEED_SAMPLE_NEWS=true)."""

from datetime import date

SAMPLE_NEWS = [
    {
        "title": "2024년 하반기 부동산 시장 전망: 수도권 반등 시작되나?",
        "summary": "서울 주요 지역의 아파트 거래량이 증가세를 보이며 하반기 부동산 시장의 회복 기대감이 커지고 있습니다.",
        "category": "MARKET",
        "source": "부동산데일리",
        "published_on": date(2024, 5, 20),
    },
    {
        "title": "전세사기 피해 방지법 국회 본회의 통과",
        "summary": "임차인의 보증금을 보호하기 위한 특별법 개정안이 통과되었습니다. 주요 변경 사항과 임차인이 알아야 할 주의사항을 정리했습니다.",
        "category": "POLICY",
        "source": "정책뉴스",
        "published_on": date(2024, 5, 18),
    },
    {
        "title": "신생아 특례대출 금리 인하, 신혼부부 내 집 마련 기회",
        "summary": "정부가 신생아 특례대출의 금리를 추가 인하하기로 결정했습니다. 대출 한도와 조건이 어떻게 바뀌었는지 확인하세요.",
        "category": "FINANCE",
        "source": "금융인사이트",
        "published_on": date(2024, 5, 15),
    },
]
