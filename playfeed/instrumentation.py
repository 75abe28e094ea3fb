"""Script installed into every content surface, plus the instructions sent to it later.

The instrumentation runs as a load-time hook inside the surface's own script
context. It owns a single boolean, ``window.__playfeedMuted`` (true until the
surface is activated), and exposes ``window.__playfeedSetMuted(flag)`` which the
pool manager calls through `MUTE_SCRIPT` / `UNMUTE_SCRIPT`.

Every instruction script ends with ``true;`` so hosts that evaluate the last
expression never try to serialize a DOM node or a promise back.
"""

from __future__ import annotations

import json


MUTED_FLAG = "__playfeedMuted"
MUTE_TOGGLE = "__playfeedSetMuted"

# Name of the host binding payloads reach through
# ``window.ReactNativeWebView.postMessage(string)``.
MESSAGE_BINDING = "__playfeedPost"

VIEWPORT_CONTENT = "width=device-width, initial-scale=1.0, maximum-scale=1.0, user-scalable=no"

AD_ELEMENT_SELECTORS: tuple[str, ...] = (
    '[class*="ad-"]',
    '[class*="ads-"]',
    '[class*="advert"]',
    '[id*="ad-"]',
    '[id*="ads-"]',
    '[class*="preroll"]',
    '[id*="preroll"]',
    '[class*="interstitial"]',
    '[id*="interstitial"]',
    ".gdsdk",
    "#gdsdk",
    "#sdk__advertisement",
    "ins.adsbygoogle",
    'iframe[src*="ads"]',
    'iframe[src*="doubleclick"]',
    'iframe[src*="googlesyndication"]',
)

# Globals some game payloads probe for a monetization SDK.
SDK_GLOBALS: tuple[str, ...] = ("sdk", "SDK", "gdsdk", "GD")

_TEMPLATE = r"""
(function() {
  if (window.__playfeedInstalled) return;
  window.__playfeedInstalled = true;

  var MUTED = __MUTED_FLAG__;
  window[MUTED] = true;
  var media = window.__playfeedMedia = [];
  var contexts = window.__playfeedAudioContexts = [];

  function silence(el) {
    try { el.muted = true; el.volume = 0; el.pause(); } catch (e) {}
  }
  function voice(el) {
    try { el.muted = false; el.volume = 1; } catch (e) {}
  }
  function track(el) {
    if (media.indexOf(el) === -1) media.push(el);
    if (window[MUTED]) { try { el.muted = true; el.volume = 0; } catch (e) {} }
    return el;
  }
  function allMedia() {
    var found = Array.prototype.slice.call(document.querySelectorAll('audio, video'));
    media.forEach(function(el) { if (found.indexOf(el) === -1) found.push(el); });
    return found;
  }

  function fixViewport() {
    var head = document.head || document.documentElement;
    var meta = document.querySelector('meta[name="viewport"]');
    if (!meta) {
      meta = document.createElement('meta');
      meta.name = 'viewport';
      head.appendChild(meta);
    }
    meta.content = __VIEWPORT__;
  }

  // Audio elements
  var OriginalAudio = window.Audio;
  if (OriginalAudio) {
    window.Audio = function(src) {
      var audio = src === undefined ? new OriginalAudio() : new OriginalAudio(src);
      return track(audio);
    };
    window.Audio.prototype = OriginalAudio.prototype;
  }
  if (window.HTMLMediaElement) {
    var originalPlay = HTMLMediaElement.prototype.play;
    HTMLMediaElement.prototype.play = function() {
      track(this);
      if (window[MUTED]) return Promise.resolve();
      try {
        var result = originalPlay.apply(this, arguments);
        return result && result.catch ? result.catch(function() {}) : Promise.resolve();
      } catch (e) {
        return Promise.resolve();
      }
    };
  }

  // Audio contexts
  var OriginalAudioContext = window.AudioContext || window.webkitAudioContext;
  if (OriginalAudioContext) {
    var PatchedAudioContext = function(options) {
      var ctx = new OriginalAudioContext(options);
      contexts.push(ctx);
      if (window[MUTED]) { try { ctx.suspend(); } catch (e) {} }
      return ctx;
    };
    PatchedAudioContext.prototype = OriginalAudioContext.prototype;
    window.AudioContext = window.webkitAudioContext = PatchedAudioContext;
  }

  window[__MUTE_TOGGLE__] = function(flag) {
    window[MUTED] = !!flag;
    allMedia().forEach(window[MUTED] ? silence : voice);
    contexts.forEach(function(ctx) {
      try { window[MUTED] ? ctx.suspend() : ctx.resume(); } catch (e) {}
    });
    return window[MUTED];
  };

  // Message bridge for payloads written against a native webview host.
  if (!window.ReactNativeWebView) {
    window.ReactNativeWebView = {
      postMessage: function(data) {
        if (typeof window[__BINDING__] === 'function') window[__BINDING__](String(data));
      }
    };
  }

  // Monetization SDK stub
  var stub = {
    showBanner: function() { return Promise.resolve(); },
    hideBanner: function() { return Promise.resolve(); },
    showAd: function() {
      if (stub.onResumeGame) { try { stub.onResumeGame(); } catch (e) {} }
      return Promise.resolve();
    },
    preloadAd: function() { return Promise.resolve(); },
    showRewarded: function() { return Promise.resolve({ success: true }); },
    addEventListener: function() {},
    removeEventListener: function() {}
  };
  __SDK_GLOBALS__.forEach(function(name) { window[name] = stub; });

  function onDocument() {
    fixViewport();
    allMedia().forEach(function(el) { if (window[MUTED]) silence(el); });

    var style = document.createElement('style');
    style.textContent =
      'html, body { overflow: hidden !important; -webkit-user-select: none !important; user-select: none !important; -webkit-touch-callout: none !important; }\n' +
      __AD_SELECTORS__ + ' { display: none !important; visibility: hidden !important; }';
    (document.head || document.documentElement).appendChild(style);

    new MutationObserver(function() {
      if (!window[MUTED]) return;
      document.querySelectorAll('audio, video').forEach(function(el) { track(el); silence(el); });
    }).observe(document.documentElement, { childList: true, subtree: true });
  }

  document.addEventListener('contextmenu', function(e) { e.preventDefault(); }, true);
  document.addEventListener('selectstart', function(e) { e.preventDefault(); }, true);

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', onDocument);
  } else {
    onDocument();
  }
})();
true;
"""


def build_instrumentation_script(
    *,
    ad_selectors: tuple[str, ...] = AD_ELEMENT_SELECTORS,
    sdk_globals: tuple[str, ...] = SDK_GLOBALS,
) -> str:
    # json.dumps gives us correctly quoted JS string / array literals.
    return (
        _TEMPLATE.replace("__MUTED_FLAG__", json.dumps(MUTED_FLAG))
        .replace("__MUTE_TOGGLE__", json.dumps(MUTE_TOGGLE))
        .replace("__BINDING__", json.dumps(MESSAGE_BINDING))
        .replace("__VIEWPORT__", json.dumps(VIEWPORT_CONTENT))
        .replace("__AD_SELECTORS__", json.dumps(", ".join(ad_selectors)))
        .replace("__SDK_GLOBALS__", json.dumps(list(sdk_globals)))
    )


INSTRUMENTATION_SCRIPT = build_instrumentation_script()


def _toggle_script(muted: bool) -> str:
    flag = "true" if muted else "false"
    return (
        f"if (window.{MUTE_TOGGLE}) {{ window.{MUTE_TOGGLE}({flag}); }}"
        f" else {{ window.{MUTED_FLAG} = {flag}; }}\ntrue;"
    )


MUTE_SCRIPT = _toggle_script(True)
UNMUTE_SCRIPT = _toggle_script(False)

START_GAME_SCRIPT = """
if (window.startGame) window.startGame();
if (window.start) window.start();
if (window.gameStart) window.gameStart();
true;
"""
