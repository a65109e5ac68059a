"""
Gsk binding configuration

Configures the binding generator with Gsk-specific customizations:
- renderers that are only built on some platforms are filtered out
- pkg-config packages of optional backends are dropped
"""

from gir_bindgen import (
    Generator,
    absolute_filter, file_filter_namespace, regex_filter,
    remove_c_includes, remove_pkgconfig, rename_type,
)


# ==============================================================================
# Configuration
# ==============================================================================

def configure(gen: Generator):
    """Configure generator with Gsk-specific settings"""

    # Optional backends have their own pkg-config files and headers.
    gen.preprocess(
        remove_pkgconfig('Gsk-4.0.gir', '/gtk4-(x11|wayland|broadway)/'),
        remove_c_includes('Gsk-4.0.gir', '/gsk/(gl|vulkan|broadway)/.*/'),
    )

    gsk = gen.module('Gsk-4.0')

    gsk.preprocessors += [
        # Collides with the GLShader constructor helpers.
        rename_type('Gsk-4.0.ShaderArgsBuilder', 'GLShaderArgsBuilder'),
    ]

    gsk.filters += [
        absolute_filter('C.gsk_broadway_renderer_new'),
        absolute_filter('C.gsk_vulkan_renderer_new'),
        regex_filter('C.gsk_ngl_.*'),
        file_filter_namespace('Gsk', 'gskglshader'),
    ]
