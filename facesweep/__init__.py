"""
facesweep: batch face detection over a directory of images.

Public API:
    - DetectionPipeline: preprocess → detect → suppress for one image.
    - load_detector: load the Haar cascade FaceDetector once per run.
    - FaceDetector: the detector capability the pipeline depends on.
    - Rectangle: a detected face region.
    - InvalidImage: raised for empty or malformed images.

Usage:
    from facesweep import DetectionPipeline, load_detector, load_config

    config = load_config()
    detector = load_detector(config.model)
    faces = DetectionPipeline(config).run(image, detector)
"""

from facesweep.config import AppConfig, load_config
from facesweep.model_loader import FaceDetector, load_detector
from facesweep.pipeline import DetectionPipeline
from facesweep.preprocessor import InvalidImage
from facesweep.rectangle import Rectangle

__all__ = [
    "AppConfig",
    "DetectionPipeline",
    "FaceDetector",
    "InvalidImage",
    "Rectangle",
    "load_config",
    "load_detector",
]
