from fragmentbridge.pages import MESSAGES, render_bridge_page, render_success_page


class TestBridgePage:
    """Tests for the page moving the fragment back to the listener."""

    def test_contains_status_elements(self):
        page = render_bridge_page()
        assert 'id="status"' in page
        assert 'id="spinner"' in page
        assert 'id="desc"' in page

    def test_script_posts_fragment_to_token_path(self):
        page = render_bridge_page()
        assert 'window.location.hash' in page
        assert '"/token" + \'?state=\'' in page
        assert "method: 'POST'" in page
        assert "get('state')" in page

    def test_rendering_is_deterministic(self):
        assert render_bridge_page() == render_bridge_page()
        assert render_bridge_page('vi') == render_bridge_page('vi')

    def test_localized_messages(self):
        page = render_bridge_page('vi')
        assert MESSAGES['vi']['processing'] in page
        assert '"%s"' % MESSAGES['vi']['not_found'] in page

    def test_unknown_locale_falls_back_to_english(self):
        assert render_bridge_page('xx') == render_bridge_page('en')

    def test_no_server_side_state(self):
        # The state is read by the script, never embedded.
        page = render_bridge_page()
        assert 'state=' not in page.replace("'?state='", '')


def test_success_page_localized():
    assert MESSAGES['en']['success'] in render_success_page('en')
    assert MESSAGES['vi']['success'] in render_success_page('vi')
    assert '<meta charset="UTF-8">' in render_success_page()
