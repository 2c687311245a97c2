"""
Image processing engines - functional architecture.

This package provides the image tools as pure functions over Rasters:
- transform: Resize, crop and rotate/flip
- compositing: Watermark positioning and alpha blending
- mask: Edge-mask background removal and transparency previews
- palette: Dominant color extraction and palette export
- codec: Decoding, encoding, compression and file naming

All utilities are re-exported from this module for convenient access.
"""

# Codec functions
from core.image.codec import (
    compress_image,
    create_thumbnail,
    decode_image,
    derive_output_name,
    encode_image,
    format_file_size,
    prefixed_output_name,
    resolve_mime_type,
    savings_percent,
    to_base64,
    validate_image_type,
    validate_pdf_type,
)

# Compositing functions
from core.image.compositing import (
    apply_image_watermark,
    apply_text_watermark,
    apply_watermark,
    blend_overlay,
    measure_text,
    parse_hex_color,
    resolve_position,
    scale_watermark_dimensions,
)

# Mask functions
from core.image.mask import (
    box_blur_mask,
    compute_edge_mask,
    remove_background,
    render_checkerboard_preview,
)

# Palette functions
from core.image.palette import (
    contrast_label_color,
    extract_palette,
    hex_to_rgb,
    palette_to_css,
    render_palette_html,
    rgb_to_hex,
)

# Transform functions
from core.image.transform import (
    apply_aspect_ratio,
    build_rotate_flip_matrix,
    clamp_crop_region,
    crop,
    default_crop_region,
    parse_aspect_ratio,
    resize,
    resolve_resize_dimensions,
    rotate_flip,
    rotated_bounds,
)

__all__ = [
    # Codec functions
    "compress_image",
    "create_thumbnail",
    "decode_image",
    "derive_output_name",
    "encode_image",
    "format_file_size",
    "prefixed_output_name",
    "resolve_mime_type",
    "savings_percent",
    "to_base64",
    "validate_image_type",
    "validate_pdf_type",
    # Compositing functions
    "apply_image_watermark",
    "apply_text_watermark",
    "apply_watermark",
    "blend_overlay",
    "measure_text",
    "parse_hex_color",
    "resolve_position",
    "scale_watermark_dimensions",
    # Mask functions
    "box_blur_mask",
    "compute_edge_mask",
    "remove_background",
    "render_checkerboard_preview",
    # Palette functions
    "contrast_label_color",
    "extract_palette",
    "hex_to_rgb",
    "palette_to_css",
    "render_palette_html",
    "rgb_to_hex",
    # Transform functions
    "apply_aspect_ratio",
    "build_rotate_flip_matrix",
    "clamp_crop_region",
    "crop",
    "default_crop_region",
    "parse_aspect_ratio",
    "resize",
    "resolve_resize_dimensions",
    "rotate_flip",
    "rotated_bounds",
]
