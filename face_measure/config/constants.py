"""얼굴 랜드마크 인덱스 및 시스템 상수 정의"""

from typing import Dict, List

# MediaPipe FaceMesh 468 landmarks 측정 그룹별 인덱스 (그룹 내 순서 유지)
FACE_MESH_GROUPS: Dict[str, List[int]] = {
    # 이미지 왼쪽 눈 (피험자의 오른쪽 눈) - 눈꺼풀 윤곽
    'left_eye': [33, 7, 163, 144, 145, 153, 154, 155, 133, 173,
                 157, 158, 159, 160, 161, 246],

    # 이미지 오른쪽 눈 (피험자의 왼쪽 눈)
    'right_eye': [362, 382, 381, 380, 374, 373, 390, 249, 263, 466,
                  388, 387, 386, 385, 384, 398],

    # 코 (Nose) - 콧대 + 코끝 + 콧방울
    'nose': [168, 6, 197, 195, 5, 4, 1, 19, 94, 2,
             98, 97, 326, 327, 64, 294, 48, 278, 129, 358],

    # 입 외곽 (Outer Lips)
    'outer_lips': [61, 146, 91, 181, 84, 17, 314, 405, 321, 375,
                   291, 409, 270, 269, 267, 0, 37, 39, 40, 185],

    # 턱선 (Face Contour) - 왼쪽 귀 → 턱 끝 → 오른쪽 귀 순서
    'face_contour': [127, 234, 93, 132, 58, 172, 136, 150, 149, 176, 148,
                     152, 377, 400, 378, 379, 365, 397, 288, 361, 323, 454, 356],
}

# OpenCV 기본 제공 Haar cascade 파일
FACE_CASCADE_FILE = 'haarcascade_frontalface_default.xml'
EYE_CASCADE_FILE = 'haarcascade_eye.xml'
MOUTH_CASCADE_FILE = 'haarcascade_smile.xml'

# 시스템 상수
DEFAULT_DETECT_INTERVAL = 0.5      # 스트림 재검출 간격 (초)
DEFAULT_MAX_DIMENSION = 1600       # 정지 이미지 다운스케일 기준
DEFAULT_MIN_FEATURE_SIZE = 0.15    # fallback 검출기 최소 얼굴 크기 (짧은 변 대비)
MIN_FACE_WIDTH_PX = 1.0            # 비율 계산 시 얼굴 너비 하한

CONSTRAINED_ENV_VAR = 'FACE_MEASURE_CONSTRAINED'
