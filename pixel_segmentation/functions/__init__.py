from .color import hsl_to_rgb, hue_palette
from .distance import assign_to_nearest, euclidean_distance
from .kmeans import kmeans_clustering
from .mean_shift import mean_shift_clustering
from .metrics import calinski_harabasz_index, davies_bouldin_index, silhouette_score
from .recolor import isolate_cluster, recolor_pixels, summarize_clusters
from .watershed import watershed_clustering

__all__ = [
    "assign_to_nearest",
    "calinski_harabasz_index",
    "davies_bouldin_index",
    "euclidean_distance",
    "hsl_to_rgb",
    "hue_palette",
    "isolate_cluster",
    "kmeans_clustering",
    "mean_shift_clustering",
    "recolor_pixels",
    "silhouette_score",
    "summarize_clusters",
    "watershed_clustering",
]
