import numpy as np
from numpy.typing import NDArray


def blend_layer(
    surface: NDArray[np.uint8],
    layer: NDArray[np.uint8],
    left: int,
    top: int,
    opacity: float,
) -> NDArray[np.uint8]:
    """
    Composite an RGBA layer onto an RGBA surface using source-over.

    Formula (straight alpha):
        a = layer_alpha * opacity
        out_alpha = a + dst_alpha * (1 - a)
        out = (src * a + dst * dst_alpha * (1 - a)) / out_alpha

    Args:
        surface: Destination array (H, W, 4), modified in place
        layer: Source array (h, w, 4) already scaled to its draw size
        left: Layer x origin on the surface, may be negative
        top: Layer y origin on the surface, may be negative
        opacity: Uniform alpha multiplier for the whole layer

    Returns:
        The surface, for chaining
    """
    surf_h, surf_w = surface.shape[:2]
    layer_h, layer_w = layer.shape[:2]

    # Clip the layer rectangle to the surface
    x0, y0 = max(left, 0), max(top, 0)
    x1, y1 = min(left + layer_w, surf_w), min(top + layer_h, surf_h)
    if x0 >= x1 or y0 >= y1:
        return surface

    src = layer[y0 - top : y1 - top, x0 - left : x1 - left].astype(np.float32) / 255.0
    dst = surface[y0:y1, x0:x1].astype(np.float32) / 255.0

    # Saturate so out-of-range opacities cannot wrap pixel values; NaN draws nothing
    src_alpha = np.clip(np.nan_to_num(src[:, :, 3:4] * opacity, nan=0.0), 0.0, 1.0)
    dst_alpha = dst[:, :, 3:4]

    out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
    numerator = src[:, :, :3] * src_alpha + dst[:, :, :3] * dst_alpha * (1.0 - src_alpha)
    out_rgb = np.divide(
        numerator,
        out_alpha,
        out=np.zeros_like(numerator),
        where=out_alpha > 0,
    )

    result = np.concatenate([out_rgb, out_alpha], axis=2)
    surface[y0:y1, x0:x1] = np.clip(np.rint(result * 255.0), 0, 255).astype(np.uint8)

    return surface
