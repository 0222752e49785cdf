"""배치 측정 스크립트 (이미지 파일 / 디렉토리 / 비디오)"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .processing.frame_processor import FrameProcessor
from .processing.pipeline import DetectionPipeline
from .store.records import snapshot_from_measure
from .utils import get_logger, load_config, reconfigure_logging
from .utils.exceptions import FaceMeasureException

logger = get_logger(__name__)

IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.bmp', '.webp']


def collect_image_files(inputs: List[str]) -> List[Path]:
    """
    입력 경로 목록에서 이미지 파일 수집 (디렉토리는 한 단계만 탐색)

    Args:
        inputs: 파일 또는 디렉토리 경로

    Returns:
        정렬된 이미지 파일 경로 리스트
    """
    image_files = []
    for item in inputs:
        path = Path(item)
        if path.is_dir():
            image_files.extend(
                p for p in path.iterdir() if p.suffix.lower() in IMAGE_EXTENSIONS
            )
        else:
            image_files.append(path)
    return sorted(set(image_files))


def _result_entry(
    result,
    subject: Optional[str],
    procedure: Optional[str]
) -> Dict[str, Any]:
    entry = result.to_dict()
    entry['status'] = 'success'
    if subject is not None and result.measures:
        # 저장용 snapshot (첫 번째 얼굴)
        entry['record'] = {
            'subject': subject,
            'procedure': procedure or '',
            'metrics': snapshot_from_measure(result.measures[0]).to_dict(),
        }
    return entry


def batch_measure(
    processor: FrameProcessor,
    inputs: List[str],
    video: Optional[str] = None,
    subject: Optional[str] = None,
    procedure: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    이미지 / 비디오 측정 후 결과 딕셔너리 리스트 반환

    이미지 1장 로드에 실패해도 나머지는 계속 처리한다.
    """
    results = []
    start_time = time.time()

    if video:
        for frame_result in processor.process_video(video):
            results.append(_result_entry(frame_result, subject, procedure))
    else:
        image_files = collect_image_files(inputs)
        logger.info(f"Found {len(image_files)} image(s)")

        for index, image_file in enumerate(image_files):
            try:
                frame_result = processor.process_image(image_file, index)
                results.append(_result_entry(frame_result, subject, procedure))
            except FaceMeasureException as e:
                logger.error(f"Failed to measure {image_file}: {e}")
                results.append({
                    'frame_index': index,
                    'source': str(image_file),
                    'status': 'error',
                    'error': str(e),
                })

    elapsed = time.time() - start_time
    logger.info(f"Measured {len(results)} item(s) in {elapsed:.2f}s")
    return results


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    parser = argparse.ArgumentParser(description='Face measurement (IPD, nose/mouth width, jaw length)')
    parser.add_argument('inputs', nargs='*', help='Image files or directories')
    parser.add_argument('--video', type=str, default=None, help='Video file to measure frame by frame')
    parser.add_argument('--config', type=str, default=None,
                        help='config.yaml path (detection, stream and logging sections)')
    parser.add_argument('--constrained', action='store_true',
                        help='Skip the primary detector and use the coarse fallback only')
    parser.add_argument('--subject', type=str, default=None, help='Subject name for record snapshots')
    parser.add_argument('--procedure', type=str, default=None, help='Procedure name for record snapshots')
    parser.add_argument('--output', type=str, default=None, help='Write JSON to this file instead of stdout')

    args = parser.parse_args(argv)

    if not args.inputs and not args.video:
        parser.error('at least one image path or --video is required')

    try:
        config = None
        if args.config:
            config = load_config(args.config)
            reconfigure_logging()
        pipeline = DetectionPipeline.from_config(config, constrained=True if args.constrained else None)
    except FaceMeasureException as e:
        logger.error(f"Initialization failed: {e}")
        return 1

    try:
        with pipeline:
            results = batch_measure(
                FrameProcessor(pipeline),
                args.inputs,
                video=args.video,
                subject=args.subject,
                procedure=args.procedure,
            )
    except FaceMeasureException as e:
        logger.error(f"Measurement failed: {e}")
        return 1

    text = json.dumps(results, indent=2, ensure_ascii=False)
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info(f"Results saved: {args.output}")
    else:
        sys.stdout.write(text + '\n')

    return 0


if __name__ == '__main__':
    sys.exit(main())
