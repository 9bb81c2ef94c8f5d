"""
Extraction of wall segments and landmarks from laser scans.

The scan is split into runs of neighbouring beams without large range jumps. In each run,
lines are found with RANSAC and refined with a total least squares fit. Landmarks are
reported where the range jumps (loose ends of walls) and where two extracted lines meet
close to a measured point (corners).
"""
import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .geometry import LineSegmentFeature, Vec2, Vec3
from .laser import LaserScanData
from .scene import Scene

logger = logging.getLogger(__name__)

RANSAC_ITER = 1000
RANSAC_THRESHOLD = 4.0
RANSAC_MIN_INLIERS_FOR_LINE_SEGMENT = 15

DISCONTINUITY_THRESHOLD = 60.0
LOWER_LANDMARK_MARGIN = 1.0
INTERSECTION_MARGIN = 30.0


def scan_to_points(scan: LaserScanData, pose: Vec3, scene: Scene) -> np.ndarray:
    """
    World coordinates of the points measured by a scan.

    Returns
    -------
    ndarray
        Shape (len(scan), 2), one row per beam. Rows of beams without a return are NaN.
    """
    points = np.full((len(scan), 2), np.nan)
    if scan.is_empty():
        return points
    hits = scan.hits()
    angles = pose.theta + scene.laser.beam_angles()[hits]
    origin = scene.robot.laser_origin(pose).as_array()
    lengths = scan.lengths[hits]
    points[hits] = origin + lengths[:, None] * np.stack((np.cos(angles), np.sin(angles)), -1)
    return points


def perpendicular_distance(p1, p2, points):
    """
    Distances of `points` to the infinite lines through p1 and p2.
    p1 and p2 may be arrays of shape (m, 2) to test m lines at once; the result then has shape (m, n).
    Coinciding p1 and p2 give infinite distance.
    """
    p1 = np.atleast_2d(p1)
    p2 = np.atleast_2d(p2)
    direction = p2 - p1
    num = np.abs(
        direction[:, 1:2] * points[None, :, 0]
        - direction[:, 0:1] * points[None, :, 1]
        + (p2[:, 0] * p1[:, 1] - p2[:, 1] * p1[:, 0])[:, None]
    )
    den = np.linalg.norm(direction, axis=-1)[:, None]
    return np.divide(num, den, out=np.full(num.shape, np.inf), where=den > 0)


@dataclass
class ExtractionResult:
    lines: List[LineSegmentFeature] = field(default_factory=list)
    landmarks: List[Vec2] = field(default_factory=list)


class RansacLineExtractor:
    def __init__(
        self,
        iterations: int = RANSAC_ITER,
        threshold: float = RANSAC_THRESHOLD,
        min_inliers: int = RANSAC_MIN_INLIERS_FOR_LINE_SEGMENT,
        discontinuity_threshold: float = DISCONTINUITY_THRESHOLD,
        lower_landmark_margin: float = LOWER_LANDMARK_MARGIN,
        intersection_margin: float = INTERSECTION_MARGIN,
        seed=None,
    ):
        """
        Parameters
        ----------
        iterations : int
            RANSAC hypotheses per line.
        threshold : float
            Maximum distance of an inlier from a line hypothesis.
        min_inliers : int
            A line needs more than this many inliers.
        discontinuity_threshold : float
            Range jump between neighbouring beams that splits the scan and marks a landmark.
        lower_landmark_margin : float
            Smaller range jump that marks a landmark when the neighbouring beam has no return.
        intersection_margin : float
            How close a measured point must be to the intersection of two lines to count as a corner.
        seed : int, numpy.random.Generator or None
            Seed for reproducible extraction.
        """
        self.iterations = iterations
        self.threshold = threshold
        self.min_inliers = min_inliers
        self.discontinuity_threshold = discontinuity_threshold
        self.lower_landmark_margin = lower_landmark_margin
        self.intersection_margin = intersection_margin
        self.rng = np.random.default_rng(seed)

    def extract(self, scan: LaserScanData, pose: Vec3, scene: Scene) -> ExtractionResult:
        """
        Finds wall segments and landmarks in a scan taken at `pose`.

        Returns
        -------
        ExtractionResult
            Lines in world coordinates, and landmark points.
        """
        result = ExtractionResult()
        if scan.is_empty():
            return result

        points = scan_to_points(scan, pose, scene)
        hits = scan.hits()
        distances = scan.lengths

        for partition in self._partition(points, distances, hits):
            result.lines.extend(self.fit_lines(partition))

        result.landmarks.extend(self._loose_ends(points, distances, hits))
        result.landmarks.extend(self._intersections(result.lines, points[hits]))
        logger.debug("Extracted %d lines and %d landmarks", len(result.lines), len(result.landmarks))
        return result

    def _partition(self, points, distances, hits) -> List[np.ndarray]:
        partitions = []
        current = []
        prev = None
        for i in np.flatnonzero(hits):
            split = prev is None or i != prev + 1 or abs(distances[i] - distances[prev]) > self.discontinuity_threshold
            if split and current:
                partitions.append(np.array(current))
                current = []
            current.append(points[i])
            prev = i
        if current:
            partitions.append(np.array(current))
        return partitions

    def fit_lines(self, points: np.ndarray) -> List[LineSegmentFeature]:
        """
        Repeatedly extracts the line with the most inliers from `points` (shape (n, 2), in scan order)
        until no line with more than `min_inliers` inliers is left.
        """
        lines = []
        remaining = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        while remaining.shape[0] >= self.min_inliers + 2:
            pairs = self.rng.integers(0, remaining.shape[0], size=(self.iterations, 2))
            dist = perpendicular_distance(remaining[pairs[:, 0]], remaining[pairs[:, 1]], remaining)
            inlier_counts = np.sum(dist < self.threshold, axis=-1)
            best = int(np.argmax(inlier_counts))
            if inlier_counts[best] <= self.min_inliers:
                break

            inliers = dist[best] < self.threshold
            segment = self._least_squares_segment(remaining[inliers])
            if segment is not None:
                lines.append(segment)
            remaining = remaining[~inliers]
        return lines

    @staticmethod
    def _least_squares_segment(inliers: np.ndarray):
        # total least squares: the line runs through the centroid along the main axis
        centroid = inliers.mean(axis=0)
        _, _, vt = np.linalg.svd(inliers - centroid)
        axis = vt[0]
        first = centroid + np.dot(inliers[0] - centroid, axis) * axis
        last = centroid + np.dot(inliers[-1] - centroid, axis) * axis
        try:
            return LineSegmentFeature(Vec2(*first), Vec2(*last))
        except ValueError:
            return None

    def _loose_ends(self, points, distances, hits) -> List[Vec2]:
        landmarks = []
        for i in range(1, len(distances)):
            jump = distances[i] - distances[i - 1]
            if hits[i - 1] and (
                jump > self.discontinuity_threshold or (not hits[i] and jump > self.lower_landmark_margin)
            ):
                # range grows: the previous beam saw the end of a wall
                landmarks.append(Vec2(*points[i - 1]))
            elif hits[i] and (
                -jump > self.discontinuity_threshold or (not hits[i - 1] and -jump > self.lower_landmark_margin)
            ):
                landmarks.append(Vec2(*points[i]))
        return landmarks

    def _intersections(self, lines: List[LineSegmentFeature], points: np.ndarray) -> List[Vec2]:
        landmarks = []
        if points.shape[0] == 0:
            return landmarks
        for i in range(len(lines) - 1):
            for j in range(i + 1, len(lines)):
                corner = _line_intersection(lines[i], lines[j])
                if corner is None:
                    continue
                dists = np.linalg.norm(points - corner, axis=-1)
                nearest = points[int(np.argmin(dists))]
                if (
                    dists.min() < self.intersection_margin
                    and self._within_limits(nearest, lines[i])
                    and self._within_limits(nearest, lines[j])
                ):
                    landmarks.append(Vec2(*nearest))
        return landmarks

    def _within_limits(self, point, line: LineSegmentFeature) -> bool:
        margin = self.intersection_margin
        x1, y1, x2, y2 = line.as_array()
        return (
            min(x1, x2) - margin < point[0] < max(x1, x2) + margin
            and min(y1, y2) - margin < point[1] < max(y1, y2) + margin
        )


def _line_intersection(a: LineSegmentFeature, b: LineSegmentFeature):
    """Intersection of the infinite lines through a and b, None if they are (nearly) parallel."""
    da = a.p2.minus(a.p1)
    db = b.p2.minus(b.p1)
    det = da.cross(db)
    if abs(det) < 1e-6 * da.norm() * db.norm():
        return None
    t = b.p1.minus(a.p1).cross(db) / det
    return a.p1.plus(da.scale(t)).as_array()
