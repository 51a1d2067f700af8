#!/usr/bin/env python3
"""
track_landmarks.py - Head pose and gaze tracking over a video or recording

Runs the tracker over every frame of the input and writes the smoothed
outputs (rotation, blink, iris, gaze, eye position) to a JSON file.

Usage:
    python track_landmarks.py [options]

Example:
    python track_landmarks.py --input face.mp4 --output tracking.json --model face_landmarker.task
    python track_landmarks.py --input face.mp4 --save-landmarks landmarks.json --model face_landmarker.task
    python track_landmarks.py --input landmarks.json --output tracking.json --mode iris
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple
import torch
import cv2
from tqdm import tqdm

# Import our package
sys.path.append(str(Path(__file__).parent.parent))
from gaze_tracker import (
    CalibrationState,
    HeadTracker,
    LandmarkLoader,
    OutputRecorder,
    ScreenMapper,
    TrackerConfig,
    TrackingMode,
)

VIDEO_EXTENSIONS = {'.mp4', '.avi', '.mov', '.mkv', '.webm'}


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Head pose and gaze tracking from face landmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input Types:
  The script picks the source from the file extension:
  - Video files (.mp4, .avi, etc.) -> MediaPipe detection, then tracking
  - Landmarks file (.json)         -> skip detection, replay recorded frames

Examples:
  # Track a video
  python track_landmarks.py --input face.mp4 --output tracking.json --model face_landmarker.task

  # Replay a recording in iris mode with a 9-point calibration
  python track_landmarks.py --input landmarks.json --mode iris --calibrate
        """
    )

    parser.add_argument("--input", "-i", type=str, required=True,
                        help="Input file (video or landmarks JSON)")
    parser.add_argument("--output", "-o", type=str,
                        help="Write tracking outputs to this JSON file")
    parser.add_argument("--save-landmarks", type=str,
                        help="Save detected landmarks to a JSON file (video input only)")
    parser.add_argument("--model", "-m", type=str, default="face_landmarker.task",
                        help="MediaPipe FaceLandmarker model path")

    parser.add_argument("--mode", type=str, choices=[m.value for m in TrackingMode], default="head",
                        help="Gaze source: head pose only, or head plus iris")
    parser.add_argument("--min-cutoff", type=float, default=None,
                        help="Head rotation filter jitter floor in Hz")
    parser.add_argument("--beta", type=float, default=None,
                        help="Head rotation filter speed coefficient")
    parser.add_argument("--speed-gain", type=float, default=None,
                        help="Eye position gain")
    parser.add_argument("--recenter", action="store_true",
                        help="Use the first tracked frame as the neutral pose")
    parser.add_argument("--calibrate", action="store_true",
                        help="Run the 9-point calibration from the first frame")

    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    parser.add_argument("--debug", action="store_true", help="Show debug information")

    return parser.parse_args()


def video_stream(args: argparse.Namespace) -> Tuple[Iterator[Tuple[float, Optional[torch.Tensor]]], Dict[str, Any]]:
    """Detect landmarks frame by frame from a video file."""
    # Needs the optional mediapipe extra
    from gaze_tracker.detectors import MediaPipeDetector

    capture = cv2.VideoCapture(args.input)
    try:
        if not capture.isOpened():
            raise ValueError(f"Cannot open video: {args.input}")
        fps = capture.get(cv2.CAP_PROP_FPS) or 30.0
        metadata = {
            'fps': fps,
            'width': int(capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
            'height': int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            'frame_count': int(capture.get(cv2.CAP_PROP_FRAME_COUNT)) or None,
        }
    finally:
        capture.release()

    # Resources are acquired on first iteration and released when the stream ends
    def frames() -> Iterator[Tuple[float, Optional[torch.Tensor]]]:
        detector = MediaPipeDetector(args.model, fps=fps)
        capture = cv2.VideoCapture(args.input)
        index = 0
        try:
            while True:
                ok, bgr = capture.read()
                if not ok:
                    break
                rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
                yield index / fps, detector.detect(rgb)
                index += 1
        finally:
            detector.close()
            capture.release()

    return frames(), metadata


def main() -> None:
    """Main execution function."""
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    is_video = Path(args.input).suffix.lower() in VIDEO_EXTENSIONS
    print(f"Detected input type: {'video' if is_video else 'landmarks'}")

    try:
        run(args, is_video)
    except Exception as e:
        print(f"Error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    print("Tracking completed successfully!")


def run(args: argparse.Namespace, is_video: bool) -> None:
    """Stream frames through the tracker and write the requested outputs."""
    config = TrackerConfig().replace(
        min_cutoff=args.min_cutoff,
        beta=args.beta,
        speed_gain=args.speed_gain,
    )
    tracker = HeadTracker(config=config, mode=args.mode)
    print(f"Initialized tracker in {tracker.mode.value} mode")

    if is_video:
        stream, metadata = video_stream(args)
    else:
        stream, metadata = LandmarkLoader.load_landmarks(args.input)
    print(f"  Input: {metadata['width']}x{metadata['height']}, {metadata['fps']} fps, {metadata['frame_count']} frames")

    recording_metadata = {
        'fps': metadata['fps'],
        'width': metadata['width'],
        'height': metadata['height'],
    }
    output_writer = OutputRecorder(args.output, recording_metadata) if args.output else None
    landmarks_writer = OutputRecorder(args.save_landmarks, recording_metadata) \
        if args.save_landmarks and is_video else None

    if output_writer:
        output_writer.__enter__()
        print(f"Writing tracking outputs to: {args.output}")
    if landmarks_writer:
        landmarks_writer.__enter__()
        print(f"Writing landmarks to: {args.save_landmarks}")

    if args.recenter:
        tracker.recenter()
    if args.calibrate:
        tracker.start_calibration()

    progress_bar = None
    if not args.no_progress:
        progress_bar = tqdm(total=metadata['frame_count'], desc="Tracking frames", unit="frames")

    frame_count = 0
    faces = 0
    try:
        for timestamp, landmarks in stream:
            outputs = tracker.process_frame(landmarks, timestamp)
            faces += outputs.face_detected

            if output_writer:
                output_writer.write_outputs(outputs)
            if landmarks_writer:
                landmarks_writer.write_landmarks(landmarks)

            frame_count += 1
            if progress_bar is not None:
                progress_bar.update(1)
    finally:
        if output_writer:
            output_writer.__exit__(None, None, None)
            print("Tracking outputs saved")
        if landmarks_writer:
            landmarks_writer.__exit__(None, None, None)
            print("Landmarks saved")
        if progress_bar is not None:
            progress_bar.close()

    print(f"Processing complete: {frame_count} frames, face found in {faces}")

    if args.calibrate:
        state = tracker.calibration.state
        print(f"Calibration: {state.value}")
        if state is CalibrationState.DONE:
            mapper = ScreenMapper(tracker.calibration_model)
            print(f"  Model: {tracker.calibration_model.to_dict()}")
            print(f"  Last gaze on screen: {mapper.to_screen(tracker.outputs.gaze)}")


if __name__ == "__main__":
    main()
