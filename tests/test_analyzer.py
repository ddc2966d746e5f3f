from urlsmith import analyzer
from urlsmith.models import CdnType, ManipulationStrategy


def test_cloudinary_url_uses_cdn_specific_capabilities():
    caps = analyzer.analyze_image_url(
        "https://res.cloudinary.com/demo/image/upload/w_300,h_200,c_crop/sample.jpg"
    )
    assert caps.cdn_type is CdnType.CLOUDINARY
    assert caps.strategy is ManipulationStrategy.CDN_SPECIFIC
    assert caps.can_adjust_width and caps.can_adjust_height and caps.can_adjust_quality


def test_cdn_specific_wins_over_generic_query_parameters():
    caps = analyzer.analyze_image_url("https://res.cloudinary.com/demo/image/upload/sample.jpg?w=100&h=50")
    assert caps.strategy is ManipulationStrategy.CDN_SPECIFIC


def test_query_parameters_detected():
    caps = analyzer.analyze_image_url("https://example.com/image.jpg?w=800&h=600")
    assert caps.strategy is ManipulationStrategy.QUERY_PARAMETERS
    assert caps.width_param_name == "w"
    assert caps.height_param_name == "h"
    assert caps.can_adjust_width and caps.can_adjust_height
    assert not caps.can_adjust_quality
    assert caps.quality_param_name is None


def test_query_parameter_name_keeps_original_case():
    caps = analyzer.analyze_image_url("https://example.com/image.jpg?Width=800&qlt=70")
    assert caps.width_param_name == "Width"
    assert caps.quality_param_name == "qlt"
    assert not caps.can_adjust_height


def test_non_numeric_query_values_are_ignored():
    caps = analyzer.analyze_image_url("https://example.com/image.jpg?w=auto&size=large")
    assert caps.strategy is ManipulationStrategy.NONE


def test_query_parameters_carry_cdn_bounds():
    caps = analyzer.analyze_image_url("https://images.unsplash.com/photo-1?w=800&q=80")
    assert caps.strategy is ManipulationStrategy.QUERY_PARAMETERS
    assert caps.cdn_type is CdnType.UNSPLASH
    assert caps.max_width == 5000
    assert caps.max_height is None
    assert (caps.min_quality, caps.max_quality) == (0, 100)


def test_width_by_height_path_segment():
    caps = analyzer.analyze_image_url("https://example.com/800x600/image.jpg")
    assert caps.strategy is ManipulationStrategy.PATH_SEGMENTS
    assert caps.can_adjust_width and caps.can_adjust_height
    assert not caps.can_adjust_quality


def test_width_only_path_segment():
    caps = analyzer.analyze_image_url("https://example.com/images/w400/photo.png")
    assert caps.strategy is ManipulationStrategy.PATH_SEGMENTS
    assert caps.can_adjust_width
    assert not caps.can_adjust_height


def test_filename_suffix_path_segment():
    caps = analyzer.analyze_image_url("https://example.com/media/photo-640x480.webp")
    assert caps.strategy is ManipulationStrategy.PATH_SEGMENTS
    assert caps.can_adjust_width and caps.can_adjust_height


def test_wordpress_upload_detected():
    caps = analyzer.analyze_image_url("https://example.com/wp-content/uploads/2023/01/image-300x200.jpg")
    assert caps.cdn_type is CdnType.WORDPRESS
    assert caps.can_adjust_width and caps.can_adjust_height


def test_plain_url_has_no_strategy():
    caps = analyzer.analyze_image_url("https://i.ytimg.com/vi/abc/hqdefault.jpg")
    assert caps.strategy is ManipulationStrategy.NONE
    assert caps.cdn_type is CdnType.YOUTUBE
    assert not caps.can_adjust_any


def test_unparsable_url_has_no_strategy():
    caps = analyzer.analyze_image_url("http://[::1/image.jpg?w=10")
    assert caps.strategy is ManipulationStrategy.NONE


def test_analyze_path_segments_order():
    found = analyzer.analyze_path_segments(["", "w100", "200x300", "x.jpg"])
    assert found.pattern is analyzer.PathPattern.WIDTH_BY_HEIGHT
    assert (found.width, found.height, found.segment_index) == (200, 300, 2)

    found = analyzer.analyze_path_segments(["", "size_120x90", "x.jpg"])
    assert found.pattern is analyzer.PathPattern.SIZE_PREFIX
    assert (found.width, found.height) == (120, 90)

    assert analyzer.analyze_path_segments(["", "photos", "cat.jpg"]) is None


def test_detect_dimensions_merges_query_and_path():
    assert analyzer.detect_dimensions("https://example.com/800x600/a.jpg?w=400") == (400, 600)
    assert analyzer.detect_dimensions("https://example.com/a.jpg") == (None, None)


def test_oversized_digit_runs_are_not_dimensions():
    long_number = "9" * 5000
    caps = analyzer.analyze_image_url(f"https://example.com/w{long_number}/a.jpg")
    assert caps.strategy is ManipulationStrategy.NONE
    assert analyzer.analyze_path_segments(["", f"{long_number}x1", "a.jpg"]) is None
    assert analyzer.detect_dimensions(f"https://example.com/{long_number}x1/a.jpg") == (None, None)


def test_oversized_segment_falls_through_to_next_form():
    found = analyzer.analyze_path_segments(["", f"{'9' * 5000}x1", "w320", "a.jpg"])
    assert found.pattern is analyzer.PathPattern.WIDTH_ONLY
    assert (found.width, found.segment_index) == (320, 2)
