"""Script bodies ("atoms") used to emulate commands through execute-script.

Each atom is a JavaScript function expression. Callers wrap it as
``return (<atom>).apply(null, arguments)`` so its parameters are the script
arguments in order.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class JsFunction:
    """A JavaScript function passed as a script or as a script argument.

    On the wire a function is sent as its source text.
    """

    source: str

    def to_wire(self) -> str:
        return self.source

    def __str__(self) -> str:
        return self.source


GET_ATTRIBUTE = JsFunction(
    r"""function(element, attribute) {
  var name = String(attribute).toLowerCase();
  var BOOLEAN = ["allowfullscreen", "async", "autofocus", "autoplay", "checked",
    "compact", "controls", "declare", "default", "defaultchecked",
    "defaultselected", "defer", "disabled", "ended", "formnovalidate", "hidden",
    "indeterminate", "iscontenteditable", "ismap", "itemscope", "loop",
    "multiple", "muted", "nohref", "nomodule", "noresize", "noshade",
    "novalidate", "nowrap", "open", "paused", "playsinline", "pubdate",
    "readonly", "required", "reversed", "scoped", "seamless", "seeking",
    "selected", "truespeed", "typemustmatch", "willvalidate"];
  var tag = String(element.tagName).toUpperCase();
  if (name === "style") {
    var css = element.style && element.style.cssText;
    return css ? css.trim() : null;
  }
  if ((name === "selected" || name === "checked") && (tag === "OPTION" || tag === "INPUT")) {
    return element.checked || element.selected ? "true" : null;
  }
  if ((tag === "A" && name === "href") || (tag === "IMG" && name === "src")) {
    var raw = element.getAttribute(name);
    return raw === null ? null : String(element[name]);
  }
  if (BOOLEAN.indexOf(name) >= 0) {
    return element.hasAttribute(name) || element[name] === true ? "true" : null;
  }
  var prop = name === "class" ? "className" : name;
  var value;
  try {
    value = element[prop];
  } catch (e) {
    value = undefined;
  }
  if (value === undefined || value === null || typeof value === "object" || typeof value === "function") {
    value = element.getAttribute(attribute);
  }
  return value === undefined || value === null ? null : String(value);
}"""
)


IS_DISPLAYED = JsFunction(
    r"""function isShown(element) {
  if (!element || element.nodeType !== 1) {
    return false;
  }
  var tag = String(element.tagName).toUpperCase();
  if (tag === "BODY" || tag === "HTML") {
    return true;
  }
  if (tag === "OPTION" || tag === "OPTGROUP") {
    var select = element.closest("select, datalist");
    return select ? isShown(select) : true;
  }
  if (tag === "INPUT" && String(element.type).toLowerCase() === "hidden") {
    return false;
  }
  if (tag === "NOSCRIPT") {
    return false;
  }
  for (var node = element; node && node.nodeType === 1; ) {
    var style = window.getComputedStyle(node);
    if (style.display === "none" || Number(style.opacity) === 0) {
      return false;
    }
    var root = node.getRootNode ? node.getRootNode() : null;
    node = node.parentElement || (root && root.host) || null;
  }
  var own = window.getComputedStyle(element);
  if (own.visibility === "hidden" || own.visibility === "collapse") {
    return false;
  }
  function hasSize(el) {
    var rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
  }
  if (hasSize(element)) {
    return true;
  }
  return Array.prototype.some.call(element.children, function (child) {
    var style = window.getComputedStyle(child);
    return style.display !== "none" && style.visibility !== "hidden" && hasSize(child);
  });
}"""
)


FIND_ELEMENTS = JsFunction(
    r"""function(query) {
  var spec = query.relative;
  function locate(locator) {
    if (locator && locator.nodeType === 1) {
      return [locator];
    }
    var using = Object.keys(locator)[0];
    var value = locator[using];
    var found = [];
    var i;
    switch (using) {
      case "css selector":
        return Array.prototype.slice.call(document.querySelectorAll(value));
      case "tag name":
        return Array.prototype.slice.call(document.getElementsByTagName(value));
      case "xpath":
        var snap = document.evaluate(value, document, null, XPathResult.ORDERED_NODE_SNAPSHOT_TYPE, null);
        for (i = 0; i < snap.snapshotLength; i++) {
          if (snap.snapshotItem(i).nodeType === 1) {
            found.push(snap.snapshotItem(i));
          }
        }
        return found;
      case "link text":
      case "partial link text":
        var links = document.getElementsByTagName("a");
        for (i = 0; i < links.length; i++) {
          var text = (links[i].textContent || "").trim();
          if (using === "link text" ? text === value : text.indexOf(value) >= 0) {
            found.push(links[i]);
          }
        }
        return found;
      default:
        throw new Error("Unsupported locator strategy: " + using);
    }
  }
  function center(r) {
    return {x: r.left + r.width / 2, y: r.top + r.height / 2};
  }
  function gap(r, a) {
    var dx = Math.max(a.left - r.right, r.left - a.right, 0);
    var dy = Math.max(a.top - r.bottom, r.top - a.bottom, 0);
    return Math.sqrt(dx * dx + dy * dy);
  }
  var tests = {
    above: function (r, a) { return r.bottom <= a.top; },
    below: function (r, a) { return r.top >= a.bottom; },
    left: function (r, a) { return r.right <= a.left; },
    right: function (r, a) { return r.left >= a.right; },
    near: function (r, a, distance) { return gap(r, a) <= (distance == null ? 50 : distance); }
  };
  var candidates = locate(spec.root);
  var origin = null;
  spec.filters.forEach(function (filter) {
    var test = tests[filter.kind];
    if (!test) {
      throw new Error("Unsupported relative filter: " + filter.kind);
    }
    var anchor = locate(filter.args[0])[0];
    if (!anchor) {
      throw new Error("Unable to find anchor element for filter: " + filter.kind);
    }
    var a = anchor.getBoundingClientRect();
    origin = origin || center(a);
    candidates = candidates.filter(function (el) {
      return el !== anchor && test(el.getBoundingClientRect(), a, filter.args[1]);
    });
  });
  if (origin) {
    var dist = function (el) {
      var c = center(el.getBoundingClientRect());
      return Math.pow(c.x - origin.x, 2) + Math.pow(c.y - origin.y, 2);
    };
    candidates.sort(function (x, y) { return dist(x) - dist(y); });
  }
  return candidates;
}"""
)


IS_SAME_ELEMENT = JsFunction("function(a, b) { return a === b; }")


SUBMIT_FORM = JsFunction(
    r"""function(element) {
  var form = element;
  while (form.nodeName !== "FORM" && form.parentNode) {
    form = form.parentNode;
  }
  if (!form.elements) {
    throw new Error("Unable to find containing form element");
  }
  if (!form.ownerDocument) {
    throw new Error("Unable to find owning document");
  }
  var e = form.ownerDocument.createEvent("Event");
  e.initEvent("submit", true, true);
  if (form.dispatchEvent(e)) {
    HTMLFormElement.prototype.submit.call(form);
  }
}"""
)
